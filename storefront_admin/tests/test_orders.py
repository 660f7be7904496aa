from decimal import Decimal

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from storefront_admin.core.errors import NotFoundError
from storefront_admin.models.database import Order, OrderItem, Product
from storefront_admin.models.schemas import OrderCreate, OrderItemCreate, OrderUpdate
from storefront_admin.services.order_service import OrderItemService, OrderService
from storefront_admin.services.product_service import ProductService


def make_order(customer_id, product_ids, order_number="ORD-1001", total="0.00"):
    return OrderCreate(
        customer_id=customer_id,
        order_number=order_number,
        total_amount=Decimal(total),
        items=[
            OrderItemCreate(
                product_id=product_id,
                quantity=2,
                unit_price=Decimal("10.00"),
                total_price=Decimal("20.00"),
            )
            for product_id in product_ids
        ],
    )


def count_orders(db, order_number):
    return db.scalar(select(func.count(Order.id)).where(Order.order_number == order_number))


class TestOrderCreation:
    """Order and items are written together or not at all"""

    def test_create_order_with_items(self, test_db, sample_catalog):
        customer = sample_catalog["customer"]
        mixer, headphones, _ = sample_catalog["products"]

        order = OrderService(test_db).create_order(
            make_order(customer.id, [mixer.id, headphones.id], total="40.00")
        )

        assert order.id > 0
        assert order.status == "pending"
        assert order.total_amount == Decimal("40.00")
        assert order.customer_name == "Ada Lovelace"
        assert [item.product_id for item in order.items] == [mixer.id, headphones.id]
        assert order.items[0].product_name == "Club Mixer"

    def test_repeated_product_gives_repeated_rows(self, test_db, sample_catalog):
        customer = sample_catalog["customer"]
        mixer = sample_catalog["products"][0]

        order = OrderService(test_db).create_order(make_order(customer.id, [mixer.id, mixer.id]))

        assert len(order.items) == 2
        assert {item.product_id for item in order.items} == {mixer.id}

    def test_failed_item_rolls_back_whole_order(self, test_db, sample_catalog):
        customer = sample_catalog["customer"]
        mixer = sample_catalog["products"][0]

        with pytest.raises(IntegrityError):
            OrderService(test_db).create_order(
                make_order(customer.id, [mixer.id, 99999], order_number="ORD-BROKEN")
            )

        assert count_orders(test_db, "ORD-BROKEN") == 0
        assert test_db.scalar(select(func.count(OrderItem.id))) == 0

    def test_duplicate_order_number_rejected(self, test_db, sample_catalog):
        customer = sample_catalog["customer"]
        mixer = sample_catalog["products"][0]
        service = OrderService(test_db)
        service.create_order(make_order(customer.id, [mixer.id], order_number="ORD-DUP"))

        with pytest.raises(IntegrityError):
            service.create_order(make_order(customer.id, [mixer.id], order_number="ORD-DUP"))

        assert count_orders(test_db, "ORD-DUP") == 1
        assert test_db.scalar(select(func.count(OrderItem.id))) == 1

    def test_order_creation_leaves_stock_alone(self, test_db, sample_catalog):
        customer = sample_catalog["customer"]
        mixer = sample_catalog["products"][0]

        OrderService(test_db).create_order(make_order(customer.id, [mixer.id]))

        assert ProductService(test_db).get_product(mixer.id).stock_quantity == 10


class TestOrderMaintenance:

    def test_recalculate_total_sums_line_totals(self, test_db, sample_catalog):
        customer = sample_catalog["customer"]
        mixer, headphones, _ = sample_catalog["products"]
        service = OrderService(test_db)
        order = service.create_order(make_order(customer.id, [mixer.id, headphones.id], total="999.00"))

        recalculated = service.recalculate_total(order.id)

        assert recalculated.total_amount == Decimal("40.00")

    def test_recalculate_total_without_items_is_zero(self, test_db, sample_catalog):
        customer = sample_catalog["customer"]
        service = OrderService(test_db)
        order = service.create_order(make_order(customer.id, [], total="15.00"))

        assert service.recalculate_total(order.id).total_amount == Decimal("0")

    def test_recalculate_keeps_item_price_snapshots(self, test_db, sample_catalog):
        customer = sample_catalog["customer"]
        mixer = sample_catalog["products"][0]
        service = OrderService(test_db)
        order = service.create_order(make_order(customer.id, [mixer.id]))

        test_db.get(Product, mixer.id).price = Decimal("500.00")
        test_db.commit()
        recalculated = service.recalculate_total(order.id)

        assert recalculated.items[0].unit_price == Decimal("10.00")
        assert recalculated.total_amount == Decimal("20.00")

    def test_recalculate_missing_order(self, test_db):
        with pytest.raises(NotFoundError):
            OrderService(test_db).recalculate_total(424242)

    def test_new_item_does_not_touch_total_until_recalculated(self, test_db, sample_catalog):
        customer = sample_catalog["customer"]
        mixer, headphones, _ = sample_catalog["products"]
        service = OrderService(test_db)
        order = service.create_order(make_order(customer.id, [mixer.id], total="20.00"))

        OrderItemService(test_db).create_item(
            order.id,
            OrderItemCreate(product_id=headphones.id, quantity=1, unit_price=Decimal("29.99"), total_price=Decimal("29.99")),
        )

        assert service.get_order(order.id).total_amount == Decimal("20.00")
        assert service.recalculate_total(order.id).total_amount == Decimal("49.99")

    def test_update_order_is_sparse(self, test_db, sample_catalog):
        customer = sample_catalog["customer"]
        mixer = sample_catalog["products"][0]
        service = OrderService(test_db)
        order = service.create_order(make_order(customer.id, [mixer.id], total="20.00"))

        updated = service.update_order(order.id, OrderUpdate(notes="Leave at the door"))

        assert updated.notes == "Leave at the door"
        assert updated.order_number == "ORD-1001"
        assert updated.total_amount == Decimal("20.00")
        assert len(updated.items) == 1

    def test_delete_order_removes_items(self, test_db, sample_catalog):
        customer = sample_catalog["customer"]
        mixer = sample_catalog["products"][0]
        service = OrderService(test_db)
        order = service.create_order(make_order(customer.id, [mixer.id, mixer.id]))

        service.delete_order(order.id)

        assert test_db.scalar(select(func.count(OrderItem.id))) == 0
        with pytest.raises(NotFoundError):
            service.get_order(order.id)

    def test_list_by_status(self, test_db, sample_catalog):
        customer = sample_catalog["customer"]
        service = OrderService(test_db)
        service.create_order(make_order(customer.id, [], order_number="P-1"))
        second = service.create_order(make_order(customer.id, [], order_number="S-1"))
        service.update_status(second.id, "shipped")

        assert [order.order_number for order in service.list_by_status("shipped")] == ["S-1"]
        assert [order.order_number for order in service.list_by_status("pending")] == ["P-1"]
        assert service.list_by_status("cancelled") == []

    def test_list_and_get_items(self, test_db, sample_catalog):
        customer = sample_catalog["customer"]
        mixer, headphones, _ = sample_catalog["products"]
        order = OrderService(test_db).create_order(make_order(customer.id, [mixer.id, headphones.id]))
        item_service = OrderItemService(test_db)

        items = item_service.list_items()
        assert [item.product_id for item in items] == [headphones.id, mixer.id]

        item = item_service.get_item(order.items[0].id)
        assert item.order_id == order.id
        assert item.product_name == "Club Mixer"
        assert item.unit_price == Decimal("10.00")

        with pytest.raises(NotFoundError):
            item_service.get_item(424242)

    def test_delete_by_order_keeps_stored_total(self, test_db, sample_catalog):
        customer = sample_catalog["customer"]
        mixer, headphones, _ = sample_catalog["products"]
        order_service = OrderService(test_db)
        order = order_service.create_order(make_order(customer.id, [mixer.id, headphones.id], total="40.00"))

        deleted = OrderItemService(test_db).delete_by_order(order.id)

        assert deleted == 2
        assert OrderItemService(test_db).list_by_order(order.id) == []
        remaining = order_service.get_order(order.id)
        assert remaining.items == []
        assert remaining.total_amount == Decimal("40.00")

    def test_delete_item_must_belong_to_order(self, test_db, sample_catalog):
        customer = sample_catalog["customer"]
        mixer = sample_catalog["products"][0]
        order_service = OrderService(test_db)
        first = order_service.create_order(make_order(customer.id, [mixer.id], order_number="A"))
        second = order_service.create_order(make_order(customer.id, [mixer.id], order_number="B"))

        with pytest.raises(NotFoundError):
            OrderItemService(test_db).delete_item(first.items[0].id, order_id=second.id)


class TestOrdersAPI:

    @pytest.fixture
    def seven_products(self, test_db, sample_catalog):
        for number in range(4, 8):
            test_db.add(Product(name=f"Product {number}", price=Decimal("29.99"), stock_quantity=20))
        test_db.commit()
        return sample_catalog

    def test_create_and_fetch_order(self, client, seven_products):
        order_data = {
            "customer_id": 1,
            "order_number": "X1",
            "total_amount": 59.98,
            "items": [{"product_id": 7, "quantity": 2, "unit_price": 29.99, "total_price": 59.98}],
        }

        response = client.post("/api/orders/", json=order_data)
        assert response.status_code == 201
        order_id = response.json()["id"]
        assert isinstance(order_id, int) and order_id > 0

        response = client.get(f"/api/orders/{order_id}")
        assert response.status_code == 200
        order = response.json()
        assert len(order["items"]) == 1
        assert order["items"][0]["product_id"] == 7
        assert order["items"][0]["quantity"] == 2
        assert order["total_amount"] == 59.98
        assert order["status"] == "pending"
        assert order["customer_email"] == "ada@example.com"

    def test_fetching_twice_is_identical(self, client, sample_catalog):
        mixer = sample_catalog["products"][0]
        created = client.post("/api/orders/", json={
            "customer_id": sample_catalog["customer"].id,
            "order_number": "REREAD",
            "total_amount": 10,
            "items": [{"product_id": mixer.id, "quantity": 1, "unit_price": 10, "total_price": 10}],
        }).json()

        first = client.get(f"/api/orders/{created['id']}")
        second = client.get(f"/api/orders/{created['id']}")

        assert first.content == second.content

    def test_failed_item_returns_conflict_and_leaves_nothing(self, client, sample_catalog):
        mixer = sample_catalog["products"][0]
        response = client.post("/api/orders/", json={
            "customer_id": sample_catalog["customer"].id,
            "order_number": "HALF",
            "total_amount": 20,
            "items": [
                {"product_id": mixer.id, "quantity": 1, "unit_price": 10, "total_price": 10},
                {"product_id": 99999, "quantity": 1, "unit_price": 10, "total_price": 10},
            ],
        })

        assert response.status_code == 409
        assert "error" in response.json()
        assert client.get("/api/orders/").json() == []

    def test_malformed_body_rejected(self, client, sample_catalog):
        response = client.post("/api/orders/", json={
            "customer_id": sample_catalog["customer"].id,
            "order_number": "BAD",
            "total_amount": 10,
            "items": [{"product_id": 1, "quantity": 0, "unit_price": 10, "total_price": 0}],
        })
        assert response.status_code == 422

    def test_status_update(self, client, sample_catalog):
        created = client.post("/api/orders/", json={
            "customer_id": sample_catalog["customer"].id,
            "order_number": "STATUS",
            "total_amount": 0,
        }).json()

        response = client.patch(f"/api/orders/{created['id']}/status", json={"status": "shipped"})
        assert response.status_code == 200
        assert response.json()["status"] == "shipped"

        response = client.patch(f"/api/orders/{created['id']}/status", json={"status": "lost"})
        assert response.status_code == 422

        shipped = client.get("/api/orders/", params={"status": "shipped"}).json()
        assert [order["order_number"] for order in shipped] == ["STATUS"]

    def test_null_for_required_field_rejected(self, client, sample_catalog):
        created = client.post("/api/orders/", json={
            "customer_id": sample_catalog["customer"].id,
            "order_number": "NULLS",
            "total_amount": 12.5,
        }).json()

        for body in ({"status": None}, {"order_number": None}, {"total_amount": None}, {"customer_id": None}):
            assert client.patch(f"/api/orders/{created['id']}", json=body).status_code == 422, body
            assert client.put(f"/api/orders/{created['id']}", json=body).status_code == 422, body

        order = client.get(f"/api/orders/{created['id']}").json()
        assert order["status"] == "pending"
        assert order["order_number"] == "NULLS"
        assert order["total_amount"] == 12.5

    def test_recalculate_endpoint(self, client, sample_catalog):
        mixer = sample_catalog["products"][0]
        created = client.post("/api/orders/", json={
            "customer_id": sample_catalog["customer"].id,
            "order_number": "RECALC",
            "total_amount": 1,
            "items": [{"product_id": mixer.id, "quantity": 3, "unit_price": 2.5, "total_price": 7.5}],
        }).json()

        response = client.post(f"/api/orders/{created['id']}/recalculate")

        assert response.status_code == 200
        assert response.json()["total_amount"] == 7.5

    def test_order_items_endpoints(self, client, sample_catalog):
        mixer, headphones, _ = sample_catalog["products"]
        created = client.post("/api/orders/", json={
            "customer_id": sample_catalog["customer"].id,
            "order_number": "ITEMS",
            "total_amount": 10,
            "items": [{"product_id": mixer.id, "quantity": 1, "unit_price": 10, "total_price": 10}],
        }).json()

        response = client.post(f"/api/orders/{created['id']}/items", json={
            "product_id": headphones.id, "quantity": 1, "unit_price": 29.99, "total_price": 29.99,
        })
        assert response.status_code == 201
        item_id = response.json()["id"]

        items = client.get(f"/api/orders/{created['id']}/items").json()
        assert [item["product_id"] for item in items] == [mixer.id, headphones.id]

        assert client.delete(f"/api/orders/{created['id']}/items/{item_id}").status_code == 200
        assert len(client.get(f"/api/orders/{created['id']}/items").json()) == 1

    def test_get_nonexistent_order(self, client):
        response = client.get("/api/orders/99999")
        assert response.status_code == 404
        assert response.json() == {"error": "Order not found"}

    def test_delete_order(self, client, sample_catalog):
        created = client.post("/api/orders/", json={
            "customer_id": sample_catalog["customer"].id,
            "order_number": "GONE",
            "total_amount": 0,
        }).json()

        assert client.delete(f"/api/orders/{created['id']}").json() == {"message": "Order deleted"}
        assert client.get(f"/api/orders/{created['id']}").status_code == 404
        assert client.delete(f"/api/orders/{created['id']}").status_code == 404
