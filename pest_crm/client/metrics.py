"""Производные показатели по итогам статистики. Деление на ноль даёт 0."""


def _ratio(numerator, denominator) -> float:
    if not denominator:
        return 0.0
    return numerator / denominator


def orders_count(totals: dict) -> int:
    return (totals.get("primaryCount") or 0) + (totals.get("secondaryCount") or 0)


def margin_percent(totals: dict) -> int:
    """Маржинальность: чистая прибыль к сумме всех заказов, %."""
    return round(_ratio(totals.get("netProfit") or 0, totals.get("totalSum") or 0) * 100)


def average_ticket(totals: dict) -> int:
    """Средний чек."""
    return round(_ratio(totals.get("totalSum") or 0, orders_count(totals)))


def cost_per_lead(totals: dict) -> int:
    """CPL: расход на рекламу на один заказ."""
    return round(_ratio(totals.get("adSpend") or 0, orders_count(totals)))


def roas_percent(totals: dict) -> int:
    """ROAS: выручка на рубль рекламы, %."""
    return round(_ratio(totals.get("totalSum") or 0, totals.get("adSpend") or 0) * 100)


def plan_percent(fact, plan) -> int:
    """Выполнение плана, %."""
    return round(_ratio(fact or 0, plan or 0) * 100)


def plan_vs_fact(plan: dict, totals: dict) -> dict:
    keys = ("primaryCount", "secondaryCount", "primarySum", "secondarySum",
            "totalSum", "cashDesk", "adSpend", "netProfit")
    return {
        key: {
            "plan": plan.get(key) or 0,
            "fact": totals.get(key) or 0,
            "percent": plan_percent(totals.get(key), plan.get(key)),
        }
        for key in keys
    }
