# Import every model so Base.metadata knows all tables
from .user import User
from .customer import Customer
from .note import Note
from .submission import Submission
from .gallery import GalleryItem, GalleryCategory, PublishStatus
from .page import Page
from .faq import FAQ
from .redirect import Redirect

__all__ = [
    "User",
    "Customer", "Note", "Submission",
    "GalleryItem", "GalleryCategory", "PublishStatus",
    "Page", "FAQ", "Redirect",
]
