"""Tests for the calculator HTTP routes."""

import pytest
from fastapi.testclient import TestClient

from src.api.app import app
from src.api.deps import get_rate_band_source
from src.data.rate_bands import DefaultRateBandSource


@pytest.fixture
def client():
    app.dependency_overrides[get_rate_band_source] = lambda: DefaultRateBandSource()
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


class TestHealth:
    def test_health(self, client):
        resp = client.get("/health")
        assert resp.status_code == 200
        assert resp.json() == {"status": "ok"}


class TestPaymentRoute:
    def test_success(self, client):
        resp = client.post("/api/v1/calculator/payment", json={"invoiceAmount": 50000, "termMonths": 36})
        assert resp.status_code == 200
        data = resp.json()
        assert data["annualRate"] == 0.1165
        assert data["amountFinanced"] == 50495.0
        assert data["applicationFee"] == 495.0
        assert data["termMonths"] == 36
        assert 1650 < data["monthlyPayment"] < 1655
        assert data["rateBand"]["minAmount"] == 20000.01

    def test_amount_out_of_range(self, client):
        resp = client.post("/api/v1/calculator/payment", json={"invoiceAmount": 5000, "termMonths": 36})
        assert resp.status_code == 400
        assert "Invoice amount must be between" in resp.json()["detail"]

    def test_invalid_term(self, client):
        resp = client.post("/api/v1/calculator/payment", json={"invoiceAmount": 50000, "termMonths": 30})
        assert resp.status_code == 400
        assert "Term must be one of" in resp.json()["detail"]

    def test_missing_term(self, client):
        resp = client.post("/api/v1/calculator/payment", json={"invoiceAmount": 50000})
        assert resp.status_code == 422


class TestRateRoute:
    def test_success(self, client):
        resp = client.post(
            "/api/v1/calculator/rate",
            json={"invoiceAmount": 50000, "termMonths": 36, "desiredPayment": 1600},
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["converged"] is True
        assert data["standardAnnualRate"] == 0.1165
        assert data["effectiveAnnualRate"] < data["standardAnnualRate"]
        assert data["rateDifference"] < 0

    def test_desired_payment_required(self, client):
        resp = client.post("/api/v1/calculator/rate", json={"invoiceAmount": 50000, "termMonths": 36})
        assert resp.status_code == 422

    def test_oversized_payment_rejected(self, client):
        resp = client.post(
            "/api/v1/calculator/rate",
            json={"invoiceAmount": 50000, "termMonths": 36, "desiredPayment": 1e308},
        )
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Desired payment cannot exceed $500,000"

    def test_unsolvable_payment_reports_not_converged(self, client):
        resp = client.post(
            "/api/v1/calculator/rate",
            json={"invoiceAmount": 50000, "termMonths": 36, "desiredPayment": 400000},
        )
        assert resp.status_code == 200
        assert resp.json()["converged"] is False


class TestLoanAmountRoute:
    def test_band_search(self, client):
        resp = client.post("/api/v1/calculator/loan-amount", json={"desiredPayment": 1600, "termMonths": 36})
        assert resp.status_code == 200
        data = resp.json()
        assert data["annualRate"] == 0.1165
        assert 20000.01 <= data["maxInvoiceAmount"] <= 75000

    def test_explicit_rate(self, client):
        resp = client.post(
            "/api/v1/calculator/loan-amount",
            json={"desiredPayment": 1600, "termMonths": 36, "annualRate": 0.1165},
        )
        assert resp.status_code == 200
        assert resp.json()["rateBand"]["annualRate"] == 0.1165

    def test_no_valid_amount(self, client):
        resp = client.post("/api/v1/calculator/loan-amount", json={"desiredPayment": 100, "termMonths": 36})
        assert resp.status_code == 422
        assert resp.json()["detail"] == "Could not find a valid loan amount for the desired payment"

    def test_rate_out_of_range(self, client):
        resp = client.post(
            "/api/v1/calculator/loan-amount",
            json={"desiredPayment": 1600, "termMonths": 60, "annualRate": 1e7},
        )
        assert resp.status_code == 400
        assert resp.json()["detail"] == "Annual rate must be between 0 and 1"


class TestRateBandsRoute:
    def test_lists_default_bands(self, client):
        resp = client.get("/api/v1/calculator/rate-bands")
        assert resp.status_code == 200
        bands = resp.json()
        assert len(bands) == 5
        assert bands[0] == {
            "minAmount": 5000.0,
            "maxAmount": 20000.0,
            "annualRate": 0.1595,
            "isActive": True,
            "effectiveFrom": None,
            "effectiveTo": None,
        }
