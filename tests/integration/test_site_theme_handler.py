"""Integration tests for the site theme handlers."""

import pytest

from storefront.dal.tables import SiteTheme, ThemeDetail
from storefront.handlers import site_theme_handler as handler


@pytest.fixture
def create_theme(invoke, api_event, database):
    def call(**body):
        return invoke(handler.create_site_theme, api_event(body=body, method="POST"))

    return call


def update(invoke, api_event, theme_id, body):
    return invoke(handler.update_site_theme, api_event(path={"themeId": theme_id}, body=body, method="PUT"))


class TestCreateSiteTheme:

    def test_theme_with_details(self, create_theme):
        response = create_theme(theme_no="T-1", is_exclusive=True, theme_details=[
            {"title": "Hero", "sort_order": 1},
            {"title": "Footer", "preview_url": "https://cdn.example.com/footer.png"},
        ])

        assert response["statusCode"] == 201
        theme = response["json"]["theme"]
        assert theme["is_exclusive"] is True
        assert [detail["title"] for detail in theme["theme_details"]] == ["Hero", "Footer"]
        assert theme["theme_details"][1]["sort_order"] == 0

    def test_defaults(self, create_theme):
        theme = create_theme(theme_no="T-2")["json"]["theme"]

        assert theme["is_exclusive"] is False
        assert theme["theme_details"] == []

    def test_null_detail_sort_order_is_a_field_error(self, create_theme):
        response = create_theme(theme_no="T-1", theme_details=[{"title": "Hero", "sort_order": None}])

        assert response["statusCode"] == 400
        assert response["json"]["error"] == "Invalid request body"

    @pytest.mark.parametrize("body", [{}, {"theme_no": ""}, {"is_exclusive": True}])
    def test_theme_no_required(self, invoke, api_event, database, body):
        response = invoke(handler.create_site_theme, api_event(body=body, method="POST"))

        assert response["statusCode"] == 400
        assert response["json"]["error"] == "theme_no is required"

    def test_duplicate_theme_no(self, create_theme, database):
        create_theme(theme_no="T-1")

        response = create_theme(theme_no="T-1", theme_details=[{"title": "Lost"}])

        assert response["statusCode"] == 400
        assert response["json"]["error"] == "Theme number already exists"
        with database.transaction() as uow:
            assert uow.count(SiteTheme) == 1
            assert uow.count(ThemeDetail) == 0


class TestListAndGetSiteThemes:

    def test_exclusive_filter(self, create_theme, invoke, api_event):
        create_theme(theme_no="T-1")
        exclusive = create_theme(theme_no="T-2", is_exclusive=True)["json"]["theme"]

        only_exclusive = invoke(handler.get_site_themes, api_event(query={"isExclusive": "true"}))
        not_exclusive = invoke(handler.get_site_themes, api_event(query={"isExclusive": "no"}))
        everything = invoke(handler.get_site_themes, api_event())

        assert [theme["theme_id"] for theme in only_exclusive["json"]["themes"]] == [exclusive["theme_id"]]
        assert [theme["theme_no"] for theme in not_exclusive["json"]["themes"]] == ["T-1"]
        assert everything["json"]["pagination"]["total"] == 2

    def test_theme_no_filter(self, create_theme, invoke, api_event):
        create_theme(theme_no="T-1")
        create_theme(theme_no="T-2")

        response = invoke(handler.get_site_themes, api_event(query={"themeNo": "T-2"}))

        assert [theme["theme_no"] for theme in response["json"]["themes"]] == ["T-2"]

    def test_get_missing(self, invoke, api_event, database):
        response = invoke(handler.get_site_theme, api_event(path={"themeId": 4}))

        assert response["statusCode"] == 404
        assert response["json"]["error"] == "Theme not found"


class TestUpdateSiteTheme:

    def test_upserts_details(self, create_theme, invoke, api_event):
        theme = create_theme(theme_no="T-1", theme_details=[{"title": "Hero"}])["json"]["theme"]
        hero_id = theme["theme_details"][0]["theme_detail_id"]

        response = update(invoke, api_event, theme["theme_id"], {
            "is_exclusive": True,
            "theme_details": [
                {"theme_detail_id": hero_id, "description": "Large banner"},
                {"title": "Gallery", "sort_order": 2},
            ],
        })

        assert response["statusCode"] == 200
        updated = response["json"]["theme"]
        assert updated["is_exclusive"] is True
        assert updated["theme_no"] == "T-1"
        hero, gallery = updated["theme_details"]
        assert hero["theme_detail_id"] == hero_id
        assert hero["title"] == "Hero"
        assert hero["description"] == "Large banner"
        assert gallery["title"] == "Gallery"
        assert gallery["sort_order"] == 2

    def test_detail_of_another_theme_is_rejected(self, create_theme, invoke, api_event, database):
        first = create_theme(theme_no="T-1")["json"]["theme"]
        other = create_theme(theme_no="T-2", theme_details=[{"title": "Theirs"}])["json"]["theme"]
        foreign_id = other["theme_details"][0]["theme_detail_id"]

        response = update(invoke, api_event, first["theme_id"], {
            "theme_no": "T-1b",
            "theme_details": [{"theme_detail_id": foreign_id, "title": "Mine now"}],
        })

        assert response["statusCode"] == 404
        assert response["json"]["error"] == "Theme detail not found"
        with database.transaction() as uow:
            assert uow.get(SiteTheme, first["theme_id"]).theme_no == "T-1"
            assert uow.get(ThemeDetail, foreign_id).title == "Theirs"

    def test_rename_to_existing_theme_no(self, create_theme, invoke, api_event):
        create_theme(theme_no="T-1")
        second = create_theme(theme_no="T-2")["json"]["theme"]

        response = update(invoke, api_event, second["theme_id"], {"theme_no": "T-1"})

        assert response["statusCode"] == 400
        assert response["json"]["error"] == "Theme number already exists"

    def test_missing_theme(self, invoke, api_event, database):
        response = update(invoke, api_event, 77, {"is_exclusive": True})

        assert response["statusCode"] == 404
        assert response["json"]["error"] == "Theme not found"


class TestDeleteSiteTheme:

    def test_delete_removes_details(self, create_theme, invoke, api_event, database):
        theme = create_theme(theme_no="T-1", theme_details=[{"title": "A"}, {"title": "B"}])["json"]["theme"]
        create_theme(theme_no="T-2", theme_details=[{"title": "Kept"}])

        response = invoke(handler.delete_site_theme, api_event(path={"themeId": theme["theme_id"]}, method="DELETE"))

        assert response["json"] == {"message": "Theme and related details deleted successfully"}
        with database.transaction() as uow:
            assert uow.count(SiteTheme) == 1
            assert uow.count(ThemeDetail) == 1

    def test_delete_missing(self, invoke, api_event, database):
        response = invoke(handler.delete_site_theme, api_event(path={"themeId": 9}, method="DELETE"))

        assert response["statusCode"] == 404
        assert response["json"]["error"] == "Theme not found"
