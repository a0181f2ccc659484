import enum


class MovementKind(str, enum.Enum):
    entry = "entry"
    exit = "exit"

    @classmethod
    def normalize(cls, raw) -> "MovementKind | None":
        """
        Map a stored movement_type to its kind.
        Legacy rows use IN / OUT; anything else is not a stock movement.
        """
        if isinstance(raw, cls):
            return raw
        return MOVEMENT_KIND_ALIASES.get(raw)


MOVEMENT_KIND_ALIASES = {
    "entry": MovementKind.entry,
    "IN": MovementKind.entry,
    "exit": MovementKind.exit,
    "OUT": MovementKind.exit,
}

# valeurs acceptées en base (contrainte CHECK)
MOVEMENT_TYPE_VALUES = tuple(MOVEMENT_KIND_ALIASES)


class ReferenceType(str, enum.Enum):
    entry = "entry"
    application = "application"


class ApplicationStatus(str, enum.Enum):
    planned = "planned"
    completed = "completed"
    cancelled = "cancelled"


APPLICATION_STATUS_VALUES = (
    "planned",
    "completed",
    "cancelled",
    "PLANNED",
    "DONE",
    "CANCELED",
)

# applications dont les produits sont encore réservés
PLANNED_APPLICATION_STATUSES = {"planned", "PLANNED"}


class CategoryType(str, enum.Enum):
    predefined = "predefined"
    custom = "custom"
