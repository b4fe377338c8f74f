from .user import User
from .user_setting import UserSetting
from .storage_entry import StorageEntry

__all__ = [
    'User',
    'UserSetting',
    'StorageEntry',
]
