from snaplink.services.periodic import PeriodicTask
from snaplink.services.expiry import is_expired, sweep_expired, ExpirySweeper
from snaplink.services.admission_limiter import AdmissionLimiter, LimiterEvictor
from snaplink.services.link_service import LinkService


__all__ = [
    'PeriodicTask',
    'is_expired',
    'sweep_expired',
    'ExpirySweeper',
    'AdmissionLimiter',
    'LimiterEvictor',
    'LinkService',
]
