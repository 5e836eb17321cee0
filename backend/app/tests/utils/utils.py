import random
import string

from httpx import Response


def random_lower_string() -> str:
    return "".join(random.choices(string.ascii_lowercase, k=32))


def random_email() -> str:
    return f"{random_lower_string()}@{random_lower_string()}.com"


def assert_paginated_response(
    response: Response,
    expected_total: int = 1,
    expected_page: int = 1,
    expected_pages: int = 1,
    expected_size: int = 25,
) -> None:
    assert response.status_code == 200
    data = response.json()
    required_fields = ["page", "size", "pages", "total", "items"]
    for field in required_fields:
        assert field in data

    assert data["page"] == expected_page
    assert data["size"] == expected_size
    assert data["pages"] == expected_pages
    assert data["total"] == expected_total
