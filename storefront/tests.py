from __future__ import annotations

from django.contrib.auth import get_user_model
from django.test import SimpleTestCase, TestCase
from rest_framework import serializers
from rest_framework.test import APIClient

from storefront.api_responses import error, invalid, success


class ProjectRoutesTests(TestCase):
    def test_healthz(self):
        res = self.client.get("/healthz")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json(), {"status": "ok"})

    def test_token_obtain_and_authenticated_call(self):
        get_user_model().objects.create_user(username="jwt-user", password="s3cret-pass")
        client = APIClient()
        res = client.post("/api/auth/token/", {"username": "jwt-user", "password": "s3cret-pass"}, format="json")
        self.assertEqual(res.status_code, 200)
        access = res.json()["access"]

        client.credentials(HTTP_AUTHORIZATION=f"Bearer {access}")
        res = client.get("/api/orders/")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json()["data"]["orders"], [])


class _NameSerializer(serializers.Serializer):
    name = serializers.CharField()


class ApiResponsesTests(SimpleTestCase):
    def test_success_envelope(self):
        res = success(data={"id": 1}, http_status=201)
        self.assertEqual(res.status_code, 201)
        self.assertEqual(res.data, {"success": True, "data": {"id": 1}})

    def test_error_envelope_with_field_and_details(self):
        res = error(message="Nope.", code="nope", field="quantity", details={"max": 3}, http_status=409)
        self.assertEqual(res.status_code, 409)
        self.assertEqual(
            res.data,
            {
                "success": False,
                "data": {},
                "error": {"message": "Nope.", "code": "nope", "field": "quantity", "details": {"max": 3}},
            },
        )

    def test_error_envelope_omits_empty_extras(self):
        res = error(message="Nope.", code="nope")
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.data["error"], {"message": "Nope.", "code": "nope"})

    def test_invalid_carries_serializer_errors(self):
        serializer = _NameSerializer(data={})
        self.assertFalse(serializer.is_valid())
        res = invalid(serializer)
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.data["error"]["code"], "validation_error")
        self.assertIn("name", res.data["error"]["details"])
