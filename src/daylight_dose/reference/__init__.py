"""Static lookup tables for the dosimetry model.

Numeric factors live here as immutable mappings, separate from the display
labels in ``labels.py``. Calibrate by editing the tables; the ordering
constraints (lighter skin synthesizes more and burns sooner, more clothing
exposes less skin, higher SPF attenuates more) must hold.

Adding a new table:
1. Create ``reference/{name}.py`` with constants/mappings
2. Re-export from this ``__init__.py``
"""

from daylight_dose.reference.exposure import CLOTHING_EXPOSURE as CLOTHING_EXPOSURE
from daylight_dose.reference.exposure import SUNSCREEN_ATTENUATION as SUNSCREEN_ATTENUATION
from daylight_dose.reference.skin import BASE_MED_J_PER_M2 as BASE_MED_J_PER_M2
from daylight_dose.reference.skin import SKIN_TYPES as SKIN_TYPES
from daylight_dose.reference.skin import SkinTypeFactors as SkinTypeFactors
