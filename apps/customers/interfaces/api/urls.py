from django.urls import path

from .views import AddressDetailAPI, AddressListCreateAPI, DefaultAddressAPI, SetDefaultAddressAPI

urlpatterns = [
    path("addresses/", AddressListCreateAPI.as_view(), name="api_addresses"),
    path("addresses/default/", DefaultAddressAPI.as_view(), name="api_address_default"),
    path("addresses/<int:address_id>/", AddressDetailAPI.as_view(), name="api_address_detail"),
    path("addresses/<int:address_id>/default/", SetDefaultAddressAPI.as_view(), name="api_address_set_default"),
]
