"""
Custom exceptions for the COGS system.
"""


class COGSError(Exception):
    """Base exception for COGS-related errors."""
    pass


class IncompatibleMeasurementTypeError(COGSError):
    """Raised when converting between units of different measurement types."""

    def __init__(self, from_unit, to_unit, message=None):
        self.from_unit = from_unit
        self.to_unit = to_unit
        if message is None:
            message = (
                f"Cannot convert from '{from_unit.code}' ({from_unit.measurement_type}) "
                f"to '{to_unit.code}' ({to_unit.measurement_type})"
            )
        super().__init__(message)


class MissingPriceError(COGSError):
    """
    An ingredient has no supplier entries.

    Informational: the resolver costs such ingredients at zero and flags them
    as unpriced instead of raising. Callers that need a price can raise it.
    """

    def __init__(self, ingredient, message=None):
        self.ingredient = ingredient
        if message is None:
            message = f"No supplier entry found for ingredient '{ingredient.name}'"
        super().__init__(message)


class MissingComponentError(COGSError):
    """Raised when a composition line references a row that does not exist."""

    def __init__(self, kind, component_id, message=None):
        self.kind = kind
        self.component_id = component_id
        if message is None:
            message = f"Referenced {kind} {component_id} does not exist"
        super().__init__(message)


class CyclicDependencyError(COGSError):
    """Raised when a composition edge would close a cycle in the cost graph."""

    def __init__(self, cycle, message=None):
        self.cycle = list(cycle)
        if message is None:
            path = " -> ".join(f"{ref.kind}#{ref.id}" for ref in self.cycle)
            message = f"Cyclic dependency detected: {path}"
        super().__init__(message)


class InvalidPricingInputError(COGSError):
    """Raised when no valid price exists for the given cost and target margin."""

    def __init__(self, cost=None, margin=None, message=None):
        self.cost = cost
        self.margin = margin
        if message is None:
            message = f"Cannot compute a price for cost {cost} at {margin}%"
        super().__init__(message)


class InvalidYieldError(COGSError):
    """Raised when a variation's yield is zero or cannot be computed."""

    def __init__(self, variation, message=None):
        self.variation = variation
        if message is None:
            message = f"Variation '{variation.name}' has no usable yield"
        super().__init__(message)


class InvalidQuantityError(COGSError):
    """Raised when a quantity or multiplier that must be positive is not."""

    def __init__(self, value, field="quantity", message=None):
        self.value = value
        self.field = field
        if message is None:
            message = f"{field} must be greater than 0 (got {value})"
        super().__init__(message)


class OrphanedSizeReferenceError(COGSError):
    """Raised when a size group would be left without exactly one reference option."""

    def __init__(self, size_group, message=None):
        self.size_group = size_group
        if message is None:
            message = f"Size group '{size_group.name}' must have exactly one reference option"
        super().__init__(message)


class DuplicateMenuEntryError(COGSError):
    """Raised when an item (with the same size) is already on the menu."""

    def __init__(self, menu, item_type, item_id, message=None):
        self.menu = menu
        self.item_type = item_type
        self.item_id = item_id
        if message is None:
            message = f"{item_type} {item_id} is already on menu '{menu.name}'"
        super().__init__(message)


class InvalidJobTransitionError(COGSError):
    """Raised when a recalculation job is moved to a state it cannot reach."""

    def __init__(self, job, new_status, message=None):
        self.job = job
        self.new_status = new_status
        if message is None:
            message = f"Job {job.job_id} cannot move from {job.status} to {new_status}"
        super().__init__(message)
