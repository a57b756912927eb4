import pytest

from identity.customer.addresses import AddressId
from shared.exceptions import ValidationError


class TestAddressIdParse:
    @pytest.mark.parametrize("raw", [12, "12", " 12 ", "addr-12", AddressId(12)])
    def test_accepted_forms(self, raw):
        assert AddressId.parse(raw) == AddressId(12)

    @pytest.mark.parametrize("raw", ["addr-", "addr-abc", "home", "", "0", 0, -3, "addr--4", True])
    def test_unparseable_input_is_rejected(self, raw):
        with pytest.raises(ValidationError):
            AddressId.parse(raw)

    def test_str_is_the_bare_number(self):
        assert str(AddressId(41)) == "41"
