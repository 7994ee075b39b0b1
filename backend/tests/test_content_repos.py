"""
Category, article, company and location stores.
"""

import pytest
from pydantic import ValidationError as PydanticValidationError

from conftest import event_payload, i18n
from schemas.article import ArticleIn
from schemas.category import CategoryIn
from schemas.company import CompanyIn
from schemas.event import EventIn
from schemas.location import LocationIn
from services import (
    articles_repo,
    categories_repo,
    companies_repo,
    events_repo,
    locations_repo,
)
from services.errors import ValidationError


def _category(**overrides) -> CategoryIn:
    body = {"name": i18n("Musica"), "slug": i18n("Musica")}
    body.update(overrides)
    return CategoryIn.model_validate(body)


def test_category_slug_is_lowercased_and_description_optional(db):
    new_id = categories_repo.insert_category(db, _category())
    row = categories_repo.get_category(db, new_id)
    assert row.slug_en == "musica en"
    d = categories_repo.category_to_dict(row)
    assert d["description"] is None


def test_category_description_must_be_all_or_nothing():
    with pytest.raises(PydanticValidationError):
        _category(description={"pt": "Descricao", "en": "", "es": ""})


def test_children_of_parent(db):
    parent = categories_repo.insert_category(db, _category())
    child = categories_repo.insert_category(
        db, _category(name=i18n("Jazz"), slug=i18n("jazz"), parentId=parent)
    )
    kids = categories_repo.list_children(db, parent, skip=0, take=10)
    assert [k["id"] for k in kids] == [child]


def test_category_cannot_be_its_own_parent(db):
    new_id = categories_repo.insert_category(db, _category())
    with pytest.raises(ValidationError):
        categories_repo.update_category(db, _category(id=new_id, parentId=new_id))


def test_article_roundtrip_and_toggle(db):
    payload = ArticleIn.model_validate(
        {
            "title": i18n("Noticia"),
            "slug": i18n("noticia"),
            "body": i18n("Texto"),
            "heroImage": "hero.jpg",
            "thumbnail": "thumb.jpg",
            "publicationDate": "2024-02-01T10:00:00+01:00",
        }
    )
    new_id = articles_repo.insert_article(db, payload)
    d = articles_repo.article_to_dict(articles_repo.get_article(db, new_id))
    assert d["publicationDate"] == "2024-02-01T09:00:00.000Z"

    assert articles_repo.set_article_active(db, new_id, False) is True
    assert articles_repo.get_article(db, new_id).active is False
    assert articles_repo.list_article_ids(db) == [new_id]


def test_location_districts_are_replaced(db):
    body = {
        "city": "Porto",
        "citySlug": "Porto",
        "districts": [{"district": "Ribeira", "slug": "ribeira"}, {"district": "Foz", "slug": "foz"}],
    }
    new_id = locations_repo.insert_location(db, LocationIn.model_validate(body))
    row = locations_repo.get_location(db, new_id)
    assert row.city_slug == "porto"
    assert [d.slug for d in row.districts] == ["ribeira", "foz"]

    body.update(id=new_id, districts=[{"district": "Bonfim", "slug": "bonfim"}])
    assert locations_repo.update_location(db, LocationIn.model_validate(body)) is True
    row = locations_repo.get_location(db, new_id)
    assert [d.slug for d in row.districts] == ["bonfim"]


def _company(venue, **overrides) -> CompanyIn:
    body = {
        "name": "Casa da Musica",
        "slug": "casa-da-musica",
        "locationId": venue["location"].id,
        "address": {
            "street": "Avenida da Boavista",
            "number": "604",
            "city": "Porto",
            "state": "PO",
            "country": "Portugal",
            "countryCode": "pt",
        },
        "geo": {"lat": 41.15, "lng": -8.63},
    }
    body.update(overrides)
    return CompanyIn.model_validate(body)


def test_company_with_address_in_one_write(db, venue):
    new_id = companies_repo.insert_company(db, _company(venue))
    row = companies_repo.get_company(db, new_id)
    assert row.address.country_code == "PT"
    assert companies_repo.company_to_dict(row)["address"]["street"] == "Avenida da Boavista"


def test_company_duplicate_slug_fails_without_partial_rows(db, venue):
    assert companies_repo.insert_company(db, _company(venue, slug="teatro-nacional")) is None
    assert len(companies_repo.list_companies(db, skip=0, take=50)) == 1


def test_company_event_ids(db, venue):
    event_id = events_repo.insert_event(db, EventIn.model_validate(event_payload(venue)))
    assert companies_repo.list_event_ids_for_company(db, venue["company"].id) == [event_id]


def test_company_update_missing_row(db, venue):
    assert companies_repo.update_company(db, _company(venue, id=777)) is False


def test_company_geo_out_of_range_is_rejected(venue):
    with pytest.raises(PydanticValidationError):
        _company(venue, geo={"lat": 120, "lng": 0})
