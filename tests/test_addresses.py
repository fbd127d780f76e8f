import pytest
from sqlalchemy.exc import IntegrityError

from conftest import ADDRESS, bearer
from storefront.data.models.address import ShippingAddressModel
from storefront.domain.errors import AddressNotFound, DefaultAddressConflict, ValidationFailed
from storefront.domain.schemas import AddressCreate, AddressUpdate
from storefront.services.address_service import AddressService


@pytest.fixture()
def svc(db):
    return AddressService(db)


def _create(**overrides):
    return AddressCreate(**{**ADDRESS, **overrides})


class TestAddressService:
    def test_first_address_becomes_default(self, svc):
        address = svc.save_address("user-alice", _create())

        assert address.is_default is True
        assert address.country == "United States"

    def test_new_default_clears_previous_default(self, svc):
        first = svc.save_address("user-alice", _create())
        second = svc.save_address("user-alice", _create(city="Seattle", is_default=True))

        addresses = svc.list_addresses("user-alice")
        assert [a.id for a in addresses] == [second.id, first.id]
        assert [a.is_default for a in addresses] == [True, False]

    def test_non_default_address_keeps_existing_default(self, svc):
        first = svc.save_address("user-alice", _create())
        svc.save_address("user-alice", _create(city="Seattle"))

        defaults = [a.id for a in svc.list_addresses("user-alice") if a.is_default]
        assert defaults == [first.id]

    def test_fields_are_trimmed_and_blank_optionals_dropped(self, svc):
        address = svc.save_address(
            "user-alice", _create(first_name="  Alice ", address_line2="   ", phone="")
        )

        assert address.first_name == "Alice"
        assert address.address_line2 is None
        assert address.phone is None

    def test_whitespace_only_required_field_is_rejected(self, svc):
        with pytest.raises(ValidationFailed) as exc:
            svc.save_address("user-alice", _create(city="   "))

        assert exc.value.field == "city"
        assert svc.list_addresses("user-alice") == []

    def test_partial_update(self, svc):
        address = svc.save_address("user-alice", _create())

        updated = svc.update_address("user-alice", address.id, AddressUpdate(city="Eugene"))

        assert updated.city == "Eugene"
        assert updated.first_name == "Alice"

    def test_update_can_move_default(self, svc):
        first = svc.save_address("user-alice", _create())
        second = svc.save_address("user-alice", _create(city="Seattle"))

        svc.update_address("user-alice", second.id, AddressUpdate(is_default=True))

        defaults = [a.id for a in svc.list_addresses("user-alice") if a.is_default]
        assert defaults == [second.id]
        assert first.id != second.id

    def test_update_rejects_blanking_required_field(self, svc):
        address = svc.save_address("user-alice", _create())

        with pytest.raises(ValidationFailed):
            svc.update_address("user-alice", address.id, AddressUpdate(zip_code=" "))

    def test_addresses_are_private_to_their_owner(self, svc):
        address = svc.save_address("user-alice", _create())

        assert svc.list_addresses("user-bob") == []
        with pytest.raises(AddressNotFound):
            svc.get_address("user-bob", address.id)
        with pytest.raises(AddressNotFound):
            svc.update_address("user-bob", address.id, AddressUpdate(city="Nowhere"))

    def test_delete_is_idempotent_and_scoped(self, svc):
        address_id = svc.save_address("user-alice", _create()).id

        svc.delete_address("user-bob", address_id)
        assert len(svc.list_addresses("user-alice")) == 1

        svc.delete_address("user-alice", address_id)
        svc.delete_address("user-alice", address_id)
        assert svc.list_addresses("user-alice") == []


class TestSingleDefaultAddress:
    def test_database_rejects_second_default(self, db):
        db.add(ShippingAddressModel(user_id="user-alice", is_default=True, **ADDRESS))
        db.add(ShippingAddressModel(user_id="user-bob", is_default=True, **ADDRESS))
        db.commit()

        db.add(ShippingAddressModel(user_id="user-alice", is_default=True, **ADDRESS))
        with pytest.raises(IntegrityError):
            db.commit()
        db.rollback()

    def test_non_default_addresses_are_unrestricted(self, db):
        for _ in range(3):
            db.add(ShippingAddressModel(user_id="user-alice", is_default=False, **ADDRESS))
        db.commit()

    def test_racing_default_on_save_is_a_conflict(self, svc, monkeypatch):
        first_id = svc.save_address("user-alice", _create()).id
        # inny request zdazyl ustawic domyslny po naszym clear_default
        monkeypatch.setattr(svc.repo, "clear_default", lambda user_id: None)

        with pytest.raises(DefaultAddressConflict):
            svc.save_address("user-alice", _create(city="Seattle", is_default=True))

        addresses = svc.list_addresses("user-alice")
        assert [(a.id, a.is_default) for a in addresses] == [(first_id, True)]

    def test_racing_default_on_update_is_a_conflict(self, svc, monkeypatch):
        first_id = svc.save_address("user-alice", _create()).id
        second_id = svc.save_address("user-alice", _create(city="Seattle")).id
        monkeypatch.setattr(svc.repo, "clear_default", lambda user_id: None)

        with pytest.raises(DefaultAddressConflict):
            svc.update_address("user-alice", second_id, AddressUpdate(is_default=True, city="Tacoma"))

        addresses = {a.id: a for a in svc.list_addresses("user-alice")}
        assert addresses[first_id].is_default is True
        assert addresses[second_id].is_default is False
        assert addresses[second_id].city == "Seattle"


class TestAddressEndpoints:
    def test_requires_login(self, client):
        response = client.get("/addresses", headers={"X-Session-Id": "sess-1"})

        assert response.status_code == 401
        assert response.json()["detail"]["code"] == "authentication_required"

    def test_crud(self, client):
        headers = bearer("token-alice")

        created = client.post("/addresses", json=ADDRESS, headers=headers)
        assert created.status_code == 201
        address_id = created.json()["id"]
        assert created.json()["is_default"] is True

        patched = client.patch(f"/addresses/{address_id}", json={"phone": "555-0100"}, headers=headers)
        assert patched.status_code == 200
        assert patched.json()["phone"] == "555-0100"

        listed = client.get("/addresses", headers=headers)
        assert [a["id"] for a in listed.json()] == [address_id]

        assert client.delete(f"/addresses/{address_id}", headers=headers).status_code == 204
        assert client.delete(f"/addresses/{address_id}", headers=headers).status_code == 204
        assert client.get("/addresses", headers=headers).json() == []

    def test_blank_field_returns_field_error(self, client):
        response = client.post("/addresses", json={**ADDRESS, "state": "  "}, headers=bearer("token-alice"))

        assert response.status_code == 400
        assert response.json()["detail"] == {
            "code": "validation_failed",
            "message": "Pole state jest wymagane",
            "field": "state",
        }

    def test_other_users_address_is_not_found(self, client):
        created = client.post("/addresses", json=ADDRESS, headers=bearer("token-alice"))

        response = client.patch(
            f"/addresses/{created.json()['id']}", json={"city": "X"}, headers=bearer("token-bob")
        )

        assert response.status_code == 404
