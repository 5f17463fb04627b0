"""
Tests for ConversionService.
"""
import pytest
from decimal import Decimal

from cogs.services import ConversionService
from cogs.exceptions import IncompatibleMeasurementTypeError


@pytest.mark.django_db
class TestConversionService:
    """Tests for the ConversionService."""

    def test_convert_same_unit(self, tenant, units):
        """Test converting same unit returns same quantity."""
        service = ConversionService(tenant)

        assert service.convert(Decimal("100"), units["g"], units["g"]) == Decimal("100")

    def test_convert_kg_to_g(self, tenant, units):
        """Test converting kg to g."""
        service = ConversionService(tenant)

        assert service.convert(Decimal("1.5"), units["kg"], units["g"]) == Decimal("1500")

    def test_convert_g_to_kg(self, tenant, units):
        """Test converting g to kg (inverse conversion)."""
        service = ConversionService(tenant)

        result = service.convert(Decimal("250"), units["g"], units["kg"], precision=4)
        assert result == Decimal("0.2500")

    def test_convert_between_non_base_units(self, tenant, units):
        """Test converting between two non-base units goes through the base."""
        service = ConversionService(tenant)

        assert service.convert(Decimal("2"), units["dz"], units["un"]) == Decimal("24")
        assert service.convert(Decimal("2"), units["l"], units["ml"]) == Decimal("2000")

    def test_convert_round_trip(self, tenant, units):
        """Test that converting there and back returns the original quantity."""
        service = ConversionService(tenant)
        quantity = Decimal("0.375")

        there = service.convert(quantity, units["kg"], units["mg"])
        back = service.convert(there, units["mg"], units["kg"])

        assert there == Decimal("375000")
        assert back == quantity

    def test_convert_incompatible_types_raises(self, tenant, units):
        """Test that weight cannot be converted to volume."""
        service = ConversionService(tenant)

        with pytest.raises(IncompatibleMeasurementTypeError) as exc_info:
            service.convert(Decimal("1"), units["kg"], units["l"])

        assert "kg" in str(exc_info.value)
        assert "l" in str(exc_info.value)

    def test_to_base_and_from_base(self, tenant, units):
        """Test expressing quantities in and out of the base unit."""
        service = ConversionService(tenant)

        assert service.to_base(Decimal("3"), units["kg"]) == Decimal("3000")
        assert service.from_base(Decimal("36"), units["dz"]) == Decimal("3")

    def test_can_convert(self, tenant, units):
        service = ConversionService(tenant)

        assert service.can_convert(units["g"], units["kg"])
        assert not service.can_convert(units["g"], units["ml"])
