# booking_api/schemas/__init__.py
from .availability import (
    BusinessHoursOut,
    ResourceOut,
    ServiceOut,
    SlotsResponse,
    BusyIntervalOut
)

from .appointment import (
    AppointmentCreateRequest,
    AppointmentStatusUpdate,
    AppointmentOut,
    AppointmentEnvelope
)

from .business import (
    BusinessCreateRequest,
    BusinessUpdateRequest,
    BusinessOut,
    BusinessHoursItem,
    BusinessHoursUpdateRequest,
    ServiceCreateRequest,
    ServiceUpdateRequest,
    ResourceCreateRequest,
    ResourceUpdateRequest
)
