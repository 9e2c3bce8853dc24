from landchain.models.land_record import LandRecord, RecordStatus, TransferStatus
from landchain.models.wallet import Wallet
from landchain.models.admin_notification import AdminNotification

__all__ = ["LandRecord", "RecordStatus", "TransferStatus", "Wallet", "AdminNotification"]
