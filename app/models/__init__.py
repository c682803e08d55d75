from app.models.model_base import Base
from app.models.model_medication import Medication
