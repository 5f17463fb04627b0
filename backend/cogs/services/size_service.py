"""
Size group management.

Keeps every size group at exactly one reference option with positive
multipliers, and re-runs the cascade for the group's products after every
change so derived size costs and menu prices follow immediately.
"""
import logging
from decimal import Decimal

from django.db import transaction

from cogs.exceptions import InvalidQuantityError, OrphanedSizeReferenceError
from products.models import Product, SizeGroup, SizeOption

logger = logging.getLogger(__name__)


class SizeGroupService:
    """Service for size groups and their options."""

    def __init__(self, tenant):
        self.tenant = tenant

    def _cascade(self, group):
        from cogs.services.cascade_service import CascadeOrchestrator

        if not Product.all_objects.filter(tenant=self.tenant, size_group=group).exists():
            return None
        return CascadeOrchestrator(self.tenant).recalculate_for_size_group(group.pk)

    def _options(self, group):
        return list(SizeOption.objects.select_for_update().filter(group=group).order_by('sort_order', 'id'))

    @staticmethod
    def _check_multiplier(multiplier):
        if multiplier is None or Decimal(multiplier) <= 0:
            raise InvalidQuantityError(multiplier, field="multiplier")

    def validate_group(self, group):
        """
        Check the group's invariants.

        Raises:
            OrphanedSizeReferenceError: the group has options but not exactly one reference.
            InvalidQuantityError: an option has a non-positive multiplier.
        """
        options = list(group.options.all())
        if not options:
            return
        if sum(1 for option in options if option.is_reference) != 1:
            raise OrphanedSizeReferenceError(group)
        for option in options:
            self._check_multiplier(option.multiplier)

    def create_group(self, name, options=(), description=""):
        """
        Create a group with its options.

        Args:
            options: (name, multiplier) pairs in display order. The first one
                is the reference unless another is flagged via a third item.
        """
        with transaction.atomic():
            group = SizeGroup.all_objects.create(tenant=self.tenant, name=name, description=description)
            for sort_order, definition in enumerate(options):
                option_name, multiplier = definition[0], definition[1]
                self._check_multiplier(multiplier)
                SizeOption.objects.create(
                    group=group,
                    name=option_name,
                    multiplier=multiplier,
                    sort_order=sort_order,
                    is_reference=bool(definition[2]) if len(definition) > 2 else False,
                )
            if options and not group.options.filter(is_reference=True).exists():
                first = group.options.order_by('sort_order', 'id').first()
                first.is_reference = True
                first.save(update_fields=['is_reference'])
            self.validate_group(group)
        logger.info(f"Created size group {group.pk} ({name}) with {len(options)} options")
        return group

    def add_option(self, group, name, multiplier, sort_order=None):
        """Add an option; the first option of a group becomes its reference."""
        self._check_multiplier(multiplier)
        with transaction.atomic():
            options = self._options(group)
            if sort_order is None:
                sort_order = max((option.sort_order for option in options), default=-1) + 1
            option = SizeOption.objects.create(
                group=group,
                name=name,
                multiplier=multiplier,
                sort_order=sort_order,
                is_reference=not options,
            )
        self._cascade(group)
        return option

    def update_multiplier(self, option, multiplier):
        self._check_multiplier(multiplier)
        with transaction.atomic():
            option.multiplier = Decimal(multiplier)
            option.save(update_fields=['multiplier'])
        logger.info(f"Size option {option.pk} multiplier set to {multiplier}")
        self._cascade(option.group)
        return option

    def set_reference(self, option):
        """
        Make `option` the reference of its group.

        Product base costs stay the cost of the reference size, so every size
        of every product using the group is re-based on the new reference.
        """
        group = option.group
        with transaction.atomic():
            self._options(group)
            SizeOption.objects.filter(group=group, is_reference=True).exclude(pk=option.pk).update(is_reference=False)
            option.is_reference = True
            option.save(update_fields=['is_reference'])
            self.validate_group(group)
        logger.info(f"Size group {group.pk} reference is now option {option.pk} ({option.name})")
        self._cascade(group)
        return option

    def delete_option(self, option):
        """
        Delete an option. A reference option hands the reference over to the
        sibling with the lowest sort order first.

        Raises:
            OrphanedSizeReferenceError: the option is the last one of a group used by products.
        """
        group = option.group
        with transaction.atomic():
            siblings = [other for other in self._options(group) if other.pk != option.pk]
            if not siblings and Product.all_objects.filter(tenant=self.tenant, size_group=group).exists():
                raise OrphanedSizeReferenceError(
                    group,
                    message=f"Cannot delete the last option of size group '{group.name}' while products use it",
                )
            if option.is_reference and siblings:
                promoted = siblings[0]
                option.is_reference = False
                option.save(update_fields=['is_reference'])
                promoted.is_reference = True
                promoted.save(update_fields=['is_reference'])
                logger.info(f"Promoted size option {promoted.pk} ({promoted.name}) to reference of group {group.pk}")
            option.delete()
            self.validate_group(group)
        self._cascade(group)
