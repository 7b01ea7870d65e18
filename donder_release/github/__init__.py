"""Release host capability and its GitHub implementation."""

from .abc import ReleaseHostBase
from .models import RemoteRelease

__all__ = ["ReleaseHostBase", "RemoteRelease"]
