from snaplink.models.link_record_model import LinkRecordModel
from snaplink.models.link_info_model import LinkInfoModel
from snaplink.models.shorten_request_model import ShortenRequestModel


__all__ = [
    'LinkRecordModel',
    'LinkInfoModel',
    'ShortenRequestModel',
]
