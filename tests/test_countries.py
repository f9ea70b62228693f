"""Country name folding table."""
from fraud_orders.countries import COUNTRY_NAMES, build_country_lookup


class TestCountryTable:
    def test_covers_every_woocommerce_country(self):
        assert len(COUNTRY_NAMES) == 249

    def test_names_unique(self):
        assert len(set(COUNTRY_NAMES.values())) == len(COUNTRY_NAMES)

    def test_lookup_folds_less_common_names(self):
        lookup = build_country_lookup()
        assert lookup["ecuador"] == "ec"
        assert lookup["curaçao"] == "cw"
        assert lookup["virgin islands (us)"] == "vi"

    def test_custom_table(self):
        assert build_country_lookup({"FD": " Freedonia "}) == {"freedonia": "fd"}
