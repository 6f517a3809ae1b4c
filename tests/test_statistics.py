"""Тесты статистики: месяц с планом, период, расход на рекламу, план."""
from conftest import make_order

STAT_KEYS = (
    "primaryCount", "secondaryCount", "primarySum", "secondarySum",
    "totalSum", "cashDesk", "adSpend", "netProfit",
)


def _complete(client, headers, order_id, amount, percent=40):
    r = client.put(
        f"/api/orders/{order_id}",
        json={"status": "completed", "finalAmount": amount, "masterPercent": percent},
        headers=headers,
    )
    assert r.status_code == 200, r.text


def test_empty_month_is_zero_filled_and_creates_plan(client, auth_headers):
    r = client.get("/api/statistics/2024/6", headers=auth_headers)
    assert r.status_code == 200, r.text
    data = r.json()["data"]
    assert len(data["daily"]) == 30
    assert data["daily"][0]["date"] == "2024-06-01"
    assert data["daily"][-1]["date"] == "2024-06-30"
    for day in data["daily"]:
        assert all(day[k] == 0 for k in STAT_KEYS)
    assert all(data["totals"][k] == 0 for k in STAT_KEYS)
    plan = data["plan"]
    assert plan["year"] == 2024 and plan["month"] == 6
    assert all(plan[k] == 0 for k in STAT_KEYS)
    assert data["period"] is None


def test_february_leap_year_length(client, auth_headers):
    data = client.get("/api/statistics/2024/02", headers=auth_headers).json()["data"]
    assert len(data["daily"]) == 29


def test_ad_spend_upsert_affects_net_profit(client, auth_headers):
    order = make_order(client, auth_headers, date="2024-06-15")
    _complete(client, auth_headers, order["id"], 6000)

    r = client.put(
        "/api/statistics/ad-spend", json={"date": "2024-06-15", "amount": 1000}, headers=auth_headers
    )
    assert r.status_code == 200, r.text
    assert r.json()["data"] == {"date": "2024-06-15", "adSpend": 1000}

    # повторный upsert той же даты заменяет значение
    client.put("/api/statistics/ad-spend", json={"date": "2024-06-15", "amount": 1500}, headers=auth_headers)

    data = client.get("/api/statistics/2024/6", headers=auth_headers).json()["data"]
    day = next(d for d in data["daily"] if d["date"] == "2024-06-15")
    assert day["adSpend"] == 1500
    assert day["cashDesk"] == 3600
    assert day["netProfit"] == 3600 - 1500


def test_daily_breakdown_and_totals(client, auth_headers):
    p1 = make_order(client, auth_headers, date="2024-06-10")
    p2 = make_order(client, auth_headers, date="2024-06-10", time="12:00")
    s1 = make_order(client, auth_headers, date="2024-06-11", orderType="secondary")
    open_order = make_order(client, auth_headers, date="2024-06-11", time="15:00")
    cancelled = make_order(client, auth_headers, date="2024-06-12")
    _complete(client, auth_headers, p1["id"], 6000)
    _complete(client, auth_headers, p2["id"], 4000, percent=50)
    _complete(client, auth_headers, s1["id"], 3000)
    client.put(f"/api/orders/{cancelled['id']}", json={"status": "cancelled"}, headers=auth_headers)
    client.put("/api/statistics/ad-spend", json={"date": "2024-06-11", "amount": 500}, headers=auth_headers)

    data = client.get("/api/statistics/2024/6", headers=auth_headers).json()["data"]
    daily = {d["date"]: d for d in data["daily"]}

    assert daily["2024-06-10"]["primaryCount"] == 2
    assert daily["2024-06-10"]["primarySum"] == 10000
    assert daily["2024-06-10"]["cashDesk"] == 3600 + 2000
    assert daily["2024-06-11"]["secondaryCount"] == 1
    assert daily["2024-06-11"]["primaryCount"] == 0  # open_order не завершён
    assert daily["2024-06-11"]["secondarySum"] == 3000
    assert daily["2024-06-11"]["netProfit"] == 1800 - 500
    assert daily["2024-06-12"]["totalSum"] == 0

    for key in STAT_KEYS:
        assert data["totals"][key] == sum(d[key] for d in data["daily"])
    assert data["totals"]["totalSum"] == 13000
    assert open_order["status"] == "in_progress"


def test_period_spanning_months(client, auth_headers):
    order = make_order(client, auth_headers, date="2024-07-01")
    _complete(client, auth_headers, order["id"], 1000)

    r = client.get(
        "/api/statistics/period",
        params={"startDate": "2024-06-28", "endDate": "2024-07-03"},
        headers=auth_headers,
    )
    assert r.status_code == 200, r.text
    data = r.json()["data"]
    assert [d["date"] for d in data["daily"]] == [
        "2024-06-28", "2024-06-29", "2024-06-30", "2024-07-01", "2024-07-02", "2024-07-03",
    ]
    assert data["period"] == {"startDate": "2024-06-28", "endDate": "2024-07-03"}
    assert data["plan"] is None
    assert data["totals"]["primarySum"] == 1000


def test_period_validation(client, auth_headers):
    r = client.get(
        "/api/statistics/period",
        params={"startDate": "2024-07-03", "endDate": "2024-06-28"},
        headers=auth_headers,
    )
    assert r.status_code == 400
    r = client.get("/api/statistics/period", params={"startDate": "2024-07-03"}, headers=auth_headers)
    assert r.status_code == 400
    r = client.get(
        "/api/statistics/period", params={"startDate": "03.07.2024", "endDate": "2024-07-04"},
        headers=auth_headers,
    )
    assert r.status_code == 400


def test_invalid_month(client, auth_headers):
    r = client.get("/api/statistics/2024/13", headers=auth_headers)
    assert r.status_code == 400
    assert r.json()["error"] == "Месяц должен быть от 1 до 12"


def test_plan_upsert(client, auth_headers):
    r = client.put(
        "/api/statistics/plan/2024/6",
        json={"primaryCount": 30, "totalSum": 950000},
        headers=auth_headers,
    )
    assert r.status_code == 200, r.text
    plan = r.json()["data"]
    assert plan["primaryCount"] == 30
    assert plan["totalSum"] == 950000
    assert plan["secondaryCount"] == 0

    client.put("/api/statistics/plan/2024/6", json={"secondaryCount": 15}, headers=auth_headers)
    data = client.get("/api/statistics/2024/6", headers=auth_headers).json()["data"]
    assert data["plan"]["primaryCount"] == 30
    assert data["plan"]["secondaryCount"] == 15


def test_period_longer_than_a_year(client, auth_headers):
    order = make_order(client, auth_headers, date="2025-03-10")
    _complete(client, auth_headers, order["id"], 2000)

    r = client.get(
        "/api/statistics/period",
        params={"startDate": "2024-01-01", "endDate": "2025-06-30"},
        headers=auth_headers,
    )
    assert r.status_code == 200, r.text
    daily = r.json()["data"]["daily"]
    # 366 дней 2024 года + 181 день первой половины 2025
    assert len(daily) == 547
    assert daily[0]["date"] == "2024-01-01"
    assert daily[-1]["date"] == "2025-06-30"
    assert r.json()["data"]["totals"]["primarySum"] == 2000


def test_plan_created_concurrently_is_reused(client, auth_headers, monkeypatch):
    from pest_crm.services import statistics_service

    client.put("/api/statistics/plan/2024/6", json={"primaryCount": 30}, headers=auth_headers)

    original = statistics_service._find_plan
    calls = []

    async def stale_first_lookup(db, year, month):
        # первый поиск не видит план, как если бы его создал соседний запрос
        calls.append((year, month))
        if len(calls) == 1:
            return None
        return await original(db, year, month)

    monkeypatch.setattr(statistics_service, "_find_plan", stale_first_lookup)
    r = client.get("/api/statistics/2024/6", headers=auth_headers)
    assert r.status_code == 200, r.text
    assert r.json()["data"]["plan"]["primaryCount"] == 30
    assert len(calls) == 2
