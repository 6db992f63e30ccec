"""Small request helpers shared by the API tests."""


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}
