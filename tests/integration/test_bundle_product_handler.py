"""Integration tests for the bundle product handlers."""

import math

import pytest

from storefront.handlers import bundle_product_handler as handler


@pytest.fixture
def create_bp(invoke, api_event):
    def call(bundle_id, product_id):
        return invoke(handler.create_bundle_product, api_event(
            body={"bundle_id": bundle_id, "product_id": product_id},
            method="POST",
        ))

    return call


class TestCreateBundleProduct:

    def test_create_includes_product_and_bundle(self, create_bp, seed):
        response = create_bp(seed["bundle_id"], seed["product_id"])

        assert response["statusCode"] == 201
        bundle_product = response["json"]["bundleProduct"]
        assert bundle_product["bundle_id"] == seed["bundle_id"]
        assert bundle_product["product"]["name"] == "Keyboard"
        assert bundle_product["bundle"]["name"] == "Starter"

    def test_duplicate_pair(self, create_bp, seed):
        create_bp(seed["bundle_id"], seed["product_id"])

        response = create_bp(seed["bundle_id"], seed["product_id"])

        assert response["statusCode"] == 400
        assert response["json"]["error"] == "This bundle product combination already exists"

    @pytest.mark.parametrize("body", [{}, {"bundle_id": 1}, {"product_id": 1}])
    def test_required_fields(self, invoke, api_event, seed, body):
        response = invoke(handler.create_bundle_product, api_event(body=body, method="POST"))

        assert response["statusCode"] == 400
        assert response["json"]["error"] == "bundle_id and product_id are required"

    def test_missing_bundle(self, create_bp, seed):
        response = create_bp(9999, seed["product_id"])

        assert response["statusCode"] == 400
        assert response["json"]["error"] == "Bundle not found"

    def test_missing_product(self, create_bp, seed):
        response = create_bp(seed["bundle_id"], 9999)

        assert response["statusCode"] == 400
        assert response["json"]["error"] == "Product not found"


class TestListBundleProducts:

    def test_pagination_and_order(self, create_bp, invoke, api_event, seed):
        ids = [
            create_bp(seed["bundle_id"], seed["product_id"])["json"]["bundleProduct"]["bp_id"],
            create_bp(seed["bundle_id"], seed["other_product_id"])["json"]["bundleProduct"]["bp_id"],
            create_bp(seed["other_bundle_id"], seed["product_id"])["json"]["bundleProduct"]["bp_id"],
        ]

        response = invoke(handler.get_bundle_products, api_event(query={"page": 2, "limit": 2}))

        assert response["statusCode"] == 200
        assert [item["bp_id"] for item in response["json"]["bundleProducts"]] == ids[2:]
        assert response["json"]["pagination"] == {"total": 3, "page": 2, "limit": 2, "totalPages": 2}

    def test_filters(self, create_bp, invoke, api_event, seed):
        create_bp(seed["bundle_id"], seed["product_id"])
        create_bp(seed["bundle_id"], seed["other_product_id"])
        create_bp(seed["other_bundle_id"], seed["product_id"])

        by_bundle = invoke(handler.get_bundle_products, api_event(query={"bundleId": seed["bundle_id"]}))
        by_both = invoke(handler.get_bundle_products, api_event(query={
            "bundleId": seed["other_bundle_id"],
            "productId": seed["product_id"],
        }))

        assert by_bundle["json"]["pagination"]["total"] == 2
        assert all(item["bundle_id"] == seed["bundle_id"] for item in by_bundle["json"]["bundleProducts"])
        assert by_both["json"]["pagination"]["total"] == 1

    @pytest.mark.parametrize("limit", [1, 2, 3, 5, 101])
    def test_page_size_and_total_pages(self, create_bp, invoke, api_event, seed, limit):
        create_bp(seed["bundle_id"], seed["product_id"])
        create_bp(seed["bundle_id"], seed["other_product_id"])
        create_bp(seed["other_bundle_id"], seed["product_id"])

        response = invoke(handler.get_bundle_products, api_event(query={"limit": limit}))

        pagination = response["json"]["pagination"]
        assert len(response["json"]["bundleProducts"]) <= limit
        assert pagination["totalPages"] == math.ceil(pagination["total"] / limit)

    def test_empty_list(self, invoke, api_event, database):
        response = invoke(handler.get_bundle_products, api_event())

        assert response["json"] == {
            "bundleProducts": [],
            "pagination": {"total": 0, "page": 1, "limit": 10, "totalPages": 0},
        }

    @pytest.mark.parametrize("query,error", [
        ({"bundleId": "abc"}, "Invalid bundle ID"),
        ({"productId": "1x"}, "Invalid product ID"),
        ({"page": "0"}, "Invalid page parameter"),
        ({"limit": "-1"}, "Invalid limit parameter"),
        ({"bundleId": "99999999999999999999"}, "Invalid bundle ID"),
    ])
    def test_invalid_query(self, invoke, api_event, database, query, error):
        response = invoke(handler.get_bundle_products, api_event(query=query))

        assert response["statusCode"] == 400
        assert response["json"]["error"] == error


class TestGetBundleProduct:

    def test_invalid_id(self, invoke, api_event, database):
        response = invoke(handler.get_bundle_product, api_event(path={"bpId": "abc"}))

        assert response["statusCode"] == 400
        assert response["json"]["error"] == "Invalid bundle product ID"

    def test_not_found(self, invoke, api_event, database):
        response = invoke(handler.get_bundle_product, api_event(path={"bpId": 42}))

        assert response["statusCode"] == 404
        assert response["json"]["error"] == "Bundle product not found"

    @pytest.mark.parametrize("bp_id", ["99999999999999999999", "1_000", "+5"])
    def test_out_of_range_or_unusual_id(self, invoke, api_event, database, bp_id):
        response = invoke(handler.get_bundle_product, api_event(path={"bpId": bp_id}))

        assert response["statusCode"] == 400
        assert response["json"]["error"] == "Invalid bundle product ID"


class TestUpdateBundleProduct:

    def test_move_to_other_product(self, create_bp, invoke, api_event, seed):
        bp_id = create_bp(seed["bundle_id"], seed["product_id"])["json"]["bundleProduct"]["bp_id"]

        response = invoke(handler.update_bundle_product, api_event(
            path={"bpId": bp_id},
            body={"product_id": seed["other_product_id"]},
            method="PUT",
        ))

        assert response["statusCode"] == 200
        assert response["json"]["message"] == "Bundle product updated successfully"
        bundle_product = response["json"]["bundleProduct"]
        assert bundle_product["product"]["name"] == "Mouse"
        assert bundle_product["bundle_id"] == seed["bundle_id"]

    def test_missing_row(self, invoke, api_event, seed):
        response = invoke(handler.update_bundle_product, api_event(
            path={"bpId": 777},
            body={"product_id": seed["product_id"]},
            method="PUT",
        ))

        assert response["statusCode"] == 404
        assert response["json"]["error"] == "Bundle product not found"

    def test_referenced_bundle_must_exist(self, create_bp, invoke, api_event, seed):
        bp_id = create_bp(seed["bundle_id"], seed["product_id"])["json"]["bundleProduct"]["bp_id"]

        response = invoke(handler.update_bundle_product, api_event(
            path={"bpId": bp_id},
            body={"bundle_id": 9999},
            method="PUT",
        ))

        assert response["statusCode"] == 400
        assert response["json"]["error"] == "Referenced bundle does not exist"

    def test_referenced_product_must_exist(self, create_bp, invoke, api_event, seed):
        bp_id = create_bp(seed["bundle_id"], seed["product_id"])["json"]["bundleProduct"]["bp_id"]

        response = invoke(handler.update_bundle_product, api_event(
            path={"bpId": bp_id},
            body={"product_id": 9999},
            method="PUT",
        ))

        assert response["statusCode"] == 400
        assert response["json"]["error"] == "Referenced product does not exist"

    def test_update_into_existing_pair(self, create_bp, invoke, api_event, seed):
        create_bp(seed["bundle_id"], seed["product_id"])
        bp_id = create_bp(seed["bundle_id"], seed["other_product_id"])["json"]["bundleProduct"]["bp_id"]

        response = invoke(handler.update_bundle_product, api_event(
            path={"bpId": bp_id},
            body={"product_id": seed["product_id"]},
            method="PUT",
        ))

        assert response["statusCode"] == 400
        assert response["json"]["error"] == "This bundle product combination already exists"


class TestDeleteBundleProduct:

    def test_delete_then_get(self, create_bp, invoke, api_event, seed):
        bp_id = create_bp(seed["bundle_id"], seed["product_id"])["json"]["bundleProduct"]["bp_id"]

        deleted = invoke(handler.delete_bundle_product, api_event(path={"bpId": bp_id}, method="DELETE"))
        fetched = invoke(handler.get_bundle_product, api_event(path={"bpId": bp_id}))

        assert deleted["json"] == {"message": "Bundle product deleted successfully"}
        assert fetched["statusCode"] == 404

    def test_delete_missing(self, invoke, api_event, database):
        response = invoke(handler.delete_bundle_product, api_event(path={"bpId": 5}, method="DELETE"))

        assert response["statusCode"] == 404
        assert response["json"]["error"] == "Bundle product not found"
