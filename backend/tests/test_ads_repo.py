import pytest
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import func, select

from conftest import i18n
from models.ad import AdCategoryDetail, AdMenuDetail, AdMenuType, AdType
from schemas.ad import AdCategoryIn, AdIn, AdMenuIn
from services import ads_repo


AD_ADAPTER = TypeAdapter(AdIn)


def _ad(**overrides):
    body = {
        "url": "https://example.org/promo",
        "startDate": "2024-01-01T00:00:00Z",
        "endDate": "2024-02-01T00:00:00Z",
        "title": i18n("Promo"),
        "thumbnail": "https://cdn.example.org/ad.jpg",
        "pricing": 100,
    }
    body.update(overrides)
    return AD_ADAPTER.validate_python(body)


def test_discriminator_picks_variant():
    assert isinstance(_ad(type=2, categoryId=3), AdCategoryIn)
    assert isinstance(_ad(type=1, menuType=AdMenuType.FEATURED), AdMenuIn)


@pytest.mark.parametrize(
    "overrides",
    [
        {"type": 3, "categoryId": 1},
        {"type": 2},  # category ad without a category
        {"type": 1, "menuType": 99},
        {"type": 2, "categoryId": 1, "startDate": "2024-03-01T00:00:00Z"},  # start after end
        {"type": 2, "categoryId": 1, "startDate": "2024-01-01T00:00:00"},  # naive
    ],
)
def test_invalid_ads_are_rejected(overrides):
    with pytest.raises(PydanticValidationError):
        _ad(**overrides)


def test_insert_category_ad_writes_one_detail(db):
    new_id = ads_repo.insert_ad(db, _ad(type=2, categoryId=3))
    row = ads_repo.get_ad(db, new_id)
    assert row.ad_type == AdType.CATEGORY
    assert row.category_detail.category_id == 3
    assert row.menu_detail is None
    assert ads_repo.ad_to_dict(row)["categoryId"] == 3


def test_update_switching_type_replaces_detail(db):
    new_id = ads_repo.insert_ad(db, _ad(type=2, categoryId=3))

    assert ads_repo.update_ad(db, _ad(id=new_id, type=1, menuType=AdMenuType.TODAY)) is True
    row = ads_repo.get_ad(db, new_id)
    assert row.ad_type == AdType.MENU
    assert ads_repo.ad_to_dict(row)["menuType"] == AdMenuType.TODAY.value
    assert db.execute(select(func.count()).select_from(AdCategoryDetail)).scalar_one() == 0
    assert db.execute(select(func.count()).select_from(AdMenuDetail)).scalar_one() == 1


def test_update_missing_ad_returns_false(db):
    assert ads_repo.update_ad(db, _ad(id=404, type=2, categoryId=3)) is False


def test_toggle_and_list(db):
    new_id = ads_repo.insert_ad(db, _ad(type=2, categoryId=3))
    assert ads_repo.set_ad_active(db, new_id, False) is True
    items = ads_repo.list_ads(db, skip=0, take=10, name="promo")
    assert [i["id"] for i in items] == [new_id]
    assert items[0]["active"] is False
