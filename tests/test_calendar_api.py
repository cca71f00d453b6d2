import pytest


async def add_event(client, headers, **fields):
    payload = {"title": "Event", "date": "2024-02-14", "time": "12:00"}
    payload.update(fields)
    response = await client.post("/events", json=payload, headers=headers)
    assert response.status_code == 201, response.text


def cells_by_date(body):
    return {cell["date"]: cell for row in body["weeks"] for cell in row if not cell["is_empty"]}


@pytest.mark.asyncio
async def test_leap_february_grid(client):
    response = await client.get("/calendar", params={"year": 2024, "month": 2, "selected": "2024-02-14"})
    assert response.status_code == 200
    body = response.json()

    assert (body["year"], body["month"]) == (2024, 2)
    assert body["prev"] == {"year": 2024, "month": 1}
    assert body["next"] == {"year": 2024, "month": 3}
    assert len(body["weeks"]) == 5
    assert all(len(row) == 7 for row in body["weeks"])

    cells = cells_by_date(body)
    assert len(cells) == 29
    assert body["weeks"][0][4]["date"] == "2024-02-01"
    assert body["weeks"][4][4]["day_number"] == 29
    assert cells["2024-02-14"]["is_selected"] is True
    assert cells["2024-02-03"]["is_weekend"] is True
    assert body["weeks"][0][0] == {
        "is_empty": True, "date": None, "day_number": None,
        "is_weekend": False, "is_today": False, "is_selected": False, "events": [],
    }


@pytest.mark.asyncio
async def test_events_placed_in_cells_for_requester(client, alice, bob, headers_for):
    await add_event(client, headers_for(alice), title="valentine", time="19:00")
    await add_event(client, headers_for(alice), title="coffee", time="08:15", is_private=False)

    response = await client.get("/calendar", params={"year": 2024, "month": 2}, headers=headers_for(alice))
    day = cells_by_date(response.json())["2024-02-14"]
    assert [e["title"] for e in day["events"]] == ["coffee", "valentine"]
    assert day["events"][0]["time"] == "08:15"

    response = await client.get("/calendar", params={"year": 2024, "month": 2}, headers=headers_for(bob))
    day = cells_by_date(response.json())["2024-02-14"]
    assert [e["title"] for e in day["events"]] == ["coffee"]

    response = await client.get("/calendar", params={"year": 2024, "month": 2})
    day = cells_by_date(response.json())["2024-02-14"]
    assert [e["title"] for e in day["events"]] == ["coffee"]


@pytest.mark.asyncio
async def test_navigation_wraps_year(client):
    response = await client.get("/calendar", params={"year": 2024, "month": 1})
    assert response.json()["prev"] == {"year": 2023, "month": 12}

    response = await client.get("/calendar", params={"year": 2024, "month": 12})
    assert response.json()["next"] == {"year": 2025, "month": 1}


@pytest.mark.asyncio
async def test_last_supported_month_has_no_next(client):
    response = await client.get("/calendar", params={"year": 9999, "month": 12})
    assert response.status_code == 200
    body = response.json()
    assert body["prev"] == {"year": 9999, "month": 11}
    assert body["next"] is None
    assert len(cells_by_date(body)) == 31


@pytest.mark.asyncio
async def test_first_supported_month_has_no_prev(client):
    response = await client.get("/calendar", params={"year": 1, "month": 1})
    assert response.status_code == 200
    body = response.json()
    assert body["prev"] is None
    assert body["next"] == {"year": 1, "month": 2}
    assert "0001-01-01" in cells_by_date(body)


@pytest.mark.asyncio
async def test_defaults_to_current_month(client):
    response = await client.get("/calendar")
    assert response.status_code == 200
    today = [cell for row in response.json()["weeks"] for cell in row if cell["is_today"]]
    assert len(today) == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("params", [{"year": 2024, "month": 13}, {"year": 2024, "month": "may"}])
async def test_invalid_month(client, params):
    response = await client.get("/calendar", params=params)
    assert response.status_code == 400
    assert "error" in response.json()


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")
    assert response.json() == {"status": "healthy"}
