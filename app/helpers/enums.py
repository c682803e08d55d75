import enum


class Frequency(enum.Enum):
    DAILY = 'Daily'
    TWICE_DAILY = 'Twice Daily'
    THREE_TIMES_DAILY = 'Three Times Daily'
    WEEKLY = 'Weekly'
    AS_NEEDED = 'As Needed'

class FieldErrorCode(enum.Enum):
    TOO_SHORT = 'TooShort'
    INVALID_ENUM = 'InvalidEnum'
    REQUIRED = 'Required'
    INVALID = 'Invalid'

class MutationStatus(enum.Enum):
    IDLE = 'IDLE'
    PENDING = 'PENDING'
    SUCCESS = 'SUCCESS'
    ERROR = 'ERROR'

class NotificationVariant(enum.Enum):
    SUCCESS = 'success'
    DESTRUCTIVE = 'destructive'

class ResourceKind(enum.Enum):
    MEDICATIONS = 'medications'
