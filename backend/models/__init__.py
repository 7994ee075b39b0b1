# models package init
# Ensure ORM models are importable from a single place.
from models.category import Category  # noqa: F401
from models.location import Location, LocationDistrict  # noqa: F401
from models.company import Company, Address  # noqa: F401
from models.article import Article  # noqa: F401
from models.ad import Ad, AdCategoryDetail, AdMenuDetail, AdMenuType, AdType  # noqa: F401
from models.event import Event, EventRecurrence  # noqa: F401
from models.studio import Studio, StudioCategory, StudioCategoryMedia  # noqa: F401
from models.page import InstitutionalPage, PageKind  # noqa: F401
