"""
Bill sources for third-party services.

Each source returns vendor-shaped payloads and knows how to normalize them
into a ThirdPartyBill. The live vendor APIs are not integrated yet; the
sources serve fixed fixtures dated relative to the request time.
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Protocol

from raseed.schemas.common import ThirdPartyService
from raseed.schemas.third_party import BillItem, ThirdPartyBill


def bill_id(service: ThirdPartyService, user_id: str, order_id: str) -> str:
    """Deterministic bill id: re-fetching the same order updates the same bill."""
    return f"{service.value}_{user_id}_{order_id}"


class BillSource(Protocol):
    service: ThirdPartyService

    def fetch_raw(self, user_id: str, now: datetime) -> List[Dict[str, Any]]:
        ...

    def normalize(self, user_id: str, raw: Dict[str, Any], now: datetime) -> ThirdPartyBill:
        ...


class ZomatoFixtureSource:
    """Food delivery orders, shaped like Zomato's order history payload."""

    service = ThirdPartyService.ZOMATO

    def fetch_raw(self, user_id: str, now: datetime) -> List[Dict[str, Any]]:
        return [
            {
                "order_id": "ZOM123456",
                "restaurant": {"name": "Pizza Palace"},
                "grand_total": 45.99,
                "ordered_at": (now - timedelta(hours=24)).isoformat(),
                "delivery_status": "delivered",
                "dishes": [
                    {"dish_name": "Margherita Pizza", "unit_cost": 25.99, "qty": 1, "tag": "food"},
                    {"dish_name": "Garlic Bread", "unit_cost": 8.99, "qty": 1, "tag": "food"},
                    {"dish_name": "Coke", "unit_cost": 3.99, "qty": 2, "tag": "beverage"},
                    {"dish_name": "Delivery Fee", "unit_cost": 4.99, "qty": 1, "tag": "service"},
                    {"dish_name": "Tax", "unit_cost": 2.03, "qty": 1, "tag": "tax"},
                ],
            },
            {
                "order_id": "ZOM123457",
                "restaurant": {"name": "Burger House"},
                "grand_total": 32.50,
                "ordered_at": (now - timedelta(hours=48)).isoformat(),
                "delivery_status": "delivered",
                "dishes": [
                    {"dish_name": "Chicken Burger", "unit_cost": 18.99, "qty": 1, "tag": "food"},
                    {"dish_name": "French Fries", "unit_cost": 6.99, "qty": 1, "tag": "food"},
                    {"dish_name": "Milkshake", "unit_cost": 4.99, "qty": 1, "tag": "beverage"},
                    {"dish_name": "Delivery Fee", "unit_cost": 3.99, "qty": 1, "tag": "service"},
                    {"dish_name": "Tax", "unit_cost": 1.54, "qty": 1, "tag": "tax"},
                ],
            },
        ]

    def normalize(self, user_id: str, raw: Dict[str, Any], now: datetime) -> ThirdPartyBill:
        return ThirdPartyBill(
            id=bill_id(self.service, user_id, raw["order_id"]),
            user_id=user_id,
            service=self.service,
            order_id=raw["order_id"],
            restaurant=raw["restaurant"]["name"],
            total_amount=raw["grand_total"],
            items=[
                BillItem(
                    name=dish["dish_name"],
                    price=dish["unit_cost"],
                    quantity=dish["qty"],
                    category=dish.get("tag", ""),
                )
                for dish in raw.get("dishes", [])
            ],
            order_date=raw["ordered_at"],
            status=raw.get("delivery_status", "delivered"),
            created_at=now,
        )


class BlinkitFixtureSource:
    """Quick-commerce grocery orders, shaped like Blinkit's order payload."""

    service = ThirdPartyService.BLINKIT

    def fetch_raw(self, user_id: str, now: datetime) -> List[Dict[str, Any]]:
        return [
            {
                "order_number": "BLK789012",
                "store_name": "Quick Mart",
                "bill_total": 67.25,
                "placed_at": int((now - timedelta(hours=12)).timestamp()),
                "state": "delivered",
                "cart": [
                    {"product": "Milk", "mrp": 4.99, "count": 2, "department": "dairy"},
                    {"product": "Bread", "mrp": 3.99, "count": 1, "department": "bakery"},
                    {"product": "Eggs", "mrp": 5.99, "count": 1, "department": "dairy"},
                    {"product": "Bananas", "mrp": 2.99, "count": 1, "department": "fruits"},
                    {"product": "Rice", "mrp": 12.99, "count": 1, "department": "grains"},
                    {"product": "Tomatoes", "mrp": 3.99, "count": 1, "department": "vegetables"},
                    {"product": "Delivery Fee", "mrp": 2.99, "count": 1, "department": "service"},
                    {"product": "Tax", "mrp": 3.32, "count": 1, "department": "tax"},
                ],
            },
        ]

    def normalize(self, user_id: str, raw: Dict[str, Any], now: datetime) -> ThirdPartyBill:
        return ThirdPartyBill(
            id=bill_id(self.service, user_id, raw["order_number"]),
            user_id=user_id,
            service=self.service,
            order_id=raw["order_number"],
            restaurant=raw["store_name"],
            total_amount=raw["bill_total"],
            items=[
                BillItem(
                    name=line["product"],
                    price=line["mrp"],
                    quantity=line["count"],
                    category=line.get("department", ""),
                )
                for line in raw.get("cart", [])
            ],
            order_date=datetime.fromtimestamp(raw["placed_at"], tz=timezone.utc),
            status=raw.get("state", "delivered"),
            created_at=now,
        )


BILL_SOURCES: Dict[ThirdPartyService, BillSource] = {
    ThirdPartyService.ZOMATO: ZomatoFixtureSource(),
    ThirdPartyService.BLINKIT: BlinkitFixtureSource(),
}
