from supportdesk.models.user import User
from supportdesk.models.image import Image
from supportdesk.models.support_request import SupportRequest

__all__ = ["User", "Image", "SupportRequest"]
