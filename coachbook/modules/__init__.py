"""Domain modules package."""

from coachbook.modules.booking import models as booking_models  # noqa: F401
from coachbook.modules.scheduling import models as scheduling_models  # noqa: F401
