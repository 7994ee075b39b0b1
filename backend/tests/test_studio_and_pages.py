"""
Studio (body plus media categories) and institutional pages: latest row wins.
"""

import pytest
from fastapi.testclient import TestClient
from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import func, select

from conftest import i18n
from main import create_app
from models.page import PageKind
from models.studio import StudioCategory, StudioCategoryMedia
from schemas.page import PageIn
from schemas.studio import StudioIn
from services import pages_repo, studio_repo


def _studio(*categories) -> StudioIn:
    return StudioIn.model_validate({"body": i18n("Estudio"), "categories": list(categories)})


def _category(base: str, *medias: str) -> dict:
    return {"name": i18n(base), "medias": list(medias)}


def test_studio_missing_before_first_insert(db):
    assert studio_repo.get_studio(db) is None
    assert studio_repo.update_studio(db, _studio()) is False


def test_studio_insert_keeps_categories_and_medias_in_order(db):
    new_id = studio_repo.insert_studio(
        db,
        _studio(
            _category("Foto", "studio/foto-1.jpg", "studio/foto-2.jpg"),
            _category("Video", "studio/video-1.mp4"),
        ),
    )
    d = studio_repo.studio_to_dict(studio_repo.get_studio(db))
    assert d["id"] == new_id
    assert d["body"] == {"pt": "Estudio pt", "en": "Estudio en", "es": "Estudio es"}
    assert d["categories"] == [
        {"name": i18n("Foto"), "medias": ["studio/foto-1.jpg", "studio/foto-2.jpg"]},
        {"name": i18n("Video"), "medias": ["studio/video-1.mp4"]},
    ]


def test_studio_update_replaces_categories_wholesale(db):
    studio_repo.insert_studio(db, _studio(_category("Foto", "a.jpg", "b.jpg"), _category("Video", "c.mp4")))

    assert studio_repo.update_studio(db, _studio(_category("Audio", "d.mp3"))) is True

    d = studio_repo.studio_to_dict(studio_repo.get_studio(db))
    assert d["categories"] == [{"name": i18n("Audio"), "medias": ["d.mp3"]}]
    assert db.execute(select(func.count()).select_from(StudioCategory)).scalar_one() == 1
    assert db.execute(select(func.count()).select_from(StudioCategoryMedia)).scalar_one() == 1


def test_latest_studio_is_the_current_one(db):
    studio_repo.insert_studio(db, _studio(_category("Foto", "a.jpg")))
    second = studio_repo.insert_studio(db, _studio())
    assert studio_repo.get_studio(db).id == second


@pytest.mark.parametrize(
    "body",
    [
        {"body": i18n("Estudio")},  # categories missing
        {"body": {"pt": "Estudio", "en": "x", "es": "Estudio"}, "categories": []},
        {"body": i18n("Estudio"), "categories": [{"name": i18n("Foto"), "medias": [" "]}]},
    ],
)
def test_invalid_studio_is_rejected(body):
    with pytest.raises(PydanticValidationError):
        StudioIn.model_validate(body)


def test_pages_are_kept_per_kind(db):
    assert pages_repo.get_page(db, PageKind.ABOUT) is None
    assert pages_repo.update_page(db, PageKind.ABOUT, PageIn(body=i18n("Sobre"))) is False

    pages_repo.insert_page(db, PageKind.ABOUT, PageIn(body=i18n("Sobre")))
    pages_repo.insert_page(db, PageKind.CONTACT, PageIn(body=i18n("Contato")))
    assert pages_repo.update_page(db, PageKind.ABOUT, PageIn(body=i18n("Quem somos"))) is True

    about = pages_repo.page_to_dict(pages_repo.get_page(db, PageKind.ABOUT))
    assert about["kind"] == "about"
    assert about["body"]["pt"] == "Quem somos pt"
    assert pages_repo.get_page(db, PageKind.CONTACT).body_en == "Contato en"
    assert pages_repo.get_page(db, PageKind.ADVERTISEMENT) is None


@pytest.fixture
def client(app_config, session_factory):
    return TestClient(create_app(app_config, session_factory=session_factory, index_client=None))


def test_studio_routes(client):
    assert client.get("/public/studio").json() == {"success": True, "data": None}
    assert client.put("/admin/studio", json={"body": i18n("Estudio"), "categories": []}).status_code == 500

    r = client.post(
        "/admin/studio",
        json={"body": i18n("Estudio"), "categories": [_category("Foto", "a.jpg")]},
    )
    assert r.status_code == 200
    data = client.get("/public/studio").json()["data"]
    assert data["categories"][0]["medias"] == ["a.jpg"]

    assert client.post("/admin/studio", json={"body": i18n("Estudio")}).status_code == 400


def test_page_routes(client):
    r = client.post("/admin/page/contact", json={"body": i18n("Contato")})
    assert r.status_code == 200
    assert client.put("/admin/page/contact", json={"body": i18n("Fale conosco")}).json()["data"] is True

    data = client.get("/public/page/contact").json()["data"]
    assert data["body"]["es"] == "Fale conosco es"
    assert client.get("/public/page/about").json()["data"] is None
    assert client.get("/public/page/careers").status_code == 400
