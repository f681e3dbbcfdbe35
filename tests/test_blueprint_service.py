from __future__ import annotations

from datetime import datetime

import pytest
from sqlalchemy.exc import OperationalError

from contractflow.core.exceptions import NotFoundError, StoreError, ValidationError
from contractflow.models import Blueprint, BlueprintField, Contract, ContractFieldValue


def test_round_trip_orders_fields_by_position_y(blueprints, employment_blueprint) -> None:
    loaded = blueprints.get(employment_blueprint.id)

    assert loaded.name == "Employment Contract"
    assert [(f.label, f.field_type, f.position_x, f.position_y) for f in loaded.fields] == [
        ("Name", "text", 0, 0),
        ("Signed?", "checkbox", 0, 60),
    ]


def test_explicit_positions_drive_the_order(blueprints) -> None:
    created = blueprints.create(
        name="Lease",
        fields=[
            {"field_type": "date", "label": "Move-in", "position_x": 10, "position_y": 200},
            {"field_type": "text", "label": "Tenant", "position_x": 0, "position_y": 20},
        ],
    )

    fields = blueprints.get_fields(created.id)

    assert [f.label for f in fields] == ["Tenant", "Move-in"]
    assert fields[1].position_x == 10


@pytest.mark.parametrize(
    "name,fields",
    [
        ("", []),
        ("   ", []),
        ("NDA", [{"field_type": "text", "label": " "}]),
        ("NDA", [{"field_type": "radio", "label": "Choice"}]),
    ],
)
def test_create_validation_happens_before_any_write(blueprints, db, name, fields) -> None:
    with pytest.raises(ValidationError):
        blueprints.create(name=name, fields=fields)

    assert db.query(Blueprint).count() == 0
    assert db.query(BlueprintField).count() == 0


def test_list_is_newest_first(blueprints, db) -> None:
    older = blueprints.create(name="Older")
    newer = blueprints.create(name="Newer")
    older.created_at = datetime(2024, 1, 1)
    newer.created_at = datetime(2024, 6, 1)
    db.commit()

    assert [b.name for b in blueprints.list()] == ["Newer", "Older"]


def test_get_missing_blueprint(blueprints) -> None:
    with pytest.raises(NotFoundError):
        blueprints.get("does-not-exist")


def test_update_replaces_all_fields_with_new_ids(blueprints, employment_blueprint) -> None:
    old_ids = {f.id for f in employment_blueprint.fields}

    updated = blueprints.update(
        employment_blueprint.id,
        name="Employment Contract v2",
        description="Revised",
        fields=[{"field_type": "signature", "label": "Employee Signature"}],
    )

    assert updated.name == "Employment Contract v2"
    assert updated.description == "Revised"
    assert [f.label for f in updated.fields] == ["Employee Signature"]
    assert not old_ids & {f.id for f in blueprints.get_fields(updated.id)}


def test_update_rejects_blank_labels_without_touching_fields(blueprints, employment_blueprint) -> None:
    with pytest.raises(ValidationError):
        blueprints.update(employment_blueprint.id, name="X", fields=[{"label": ""}])

    assert len(blueprints.get_fields(employment_blueprint.id)) == 2


def test_update_leaves_orphaned_values_until_purged(blueprints, contracts, db, employment_blueprint) -> None:
    contract = contracts.create("Jane", employment_blueprint.id)

    blueprints.update(employment_blueprint.id, name="Employment", fields=[{"label": "Title"}])

    assert db.query(ContractFieldValue).filter_by(contract_id=contract.id).count() == 2
    assert contracts.get(contract.id).orphaned_value_count == 2

    assert blueprints.purge_orphaned_values() == 2
    assert db.query(ContractFieldValue).filter_by(contract_id=contract.id).count() == 0


def test_purge_can_be_limited_to_one_contract(blueprints, contracts, db, employment_blueprint) -> None:
    first = contracts.create("First", employment_blueprint.id)
    second = contracts.create("Second", employment_blueprint.id)
    blueprints.update(employment_blueprint.id, name="Employment", fields=[])

    assert blueprints.purge_orphaned_values(first.id) == 2
    assert db.query(ContractFieldValue).filter_by(contract_id=second.id).count() == 2


def test_delete_cascades_fields_but_keeps_contracts(blueprints, contracts, db, employment_blueprint) -> None:
    contract = contracts.create("Jane", employment_blueprint.id)

    blueprints.delete(employment_blueprint.id)

    assert db.query(Blueprint).count() == 0
    assert db.query(BlueprintField).count() == 0
    kept = db.query(Contract).filter_by(id=contract.id).one()
    assert kept.blueprint_id == employment_blueprint.id


def test_delete_missing_blueprint(blueprints) -> None:
    with pytest.raises(NotFoundError):
        blueprints.delete("nope")


def test_store_failure_rolls_back_the_whole_create(blueprints, db, monkeypatch) -> None:
    def failing_commit():
        raise OperationalError("COMMIT", {}, Exception("connection lost"))

    monkeypatch.setattr(db, "commit", failing_commit)

    with pytest.raises(StoreError):
        blueprints.create(name="NDA", fields=[{"label": "Party"}])

    monkeypatch.undo()
    assert db.query(Blueprint).count() == 0
    assert db.query(BlueprintField).count() == 0


@pytest.mark.parametrize("status", ["locked", "revoked"])
def test_purge_leaves_read_only_contracts_untouched(blueprints, contracts, db, employment_blueprint, status) -> None:
    finished = contracts.create("Finished", employment_blueprint.id)
    open_contract = contracts.create("Open", employment_blueprint.id)
    finished.status = status
    db.commit()
    blueprints.update(employment_blueprint.id, name="Employment", fields=[{"label": "Title"}])

    assert blueprints.purge_orphaned_values() == 2
    assert blueprints.purge_orphaned_values(finished.id) == 0

    assert db.query(ContractFieldValue).filter_by(contract_id=finished.id).count() == 2
    assert db.query(ContractFieldValue).filter_by(contract_id=open_contract.id).count() == 0


def test_fractional_and_negative_positions_are_kept(blueprints) -> None:
    created = blueprints.create(
        name="Lease",
        fields=[
            {"label": "Tenant", "position_x": -12.5, "position_y": 30.25},
            {"label": "Landlord", "position_x": 4.75, "position_y": -10},
        ],
    )

    fields = blueprints.get_fields(created.id)

    assert [(f.label, f.position_x, f.position_y) for f in fields] == [
        ("Landlord", 4.75, -10),
        ("Tenant", -12.5, 30.25),
    ]


def test_refresh_failure_after_update_is_a_store_error(blueprints, db, employment_blueprint, monkeypatch) -> None:
    def failing_refresh(instance, *args, **kwargs):
        raise OperationalError("SELECT", {}, Exception("connection lost"))

    monkeypatch.setattr(db, "refresh", failing_refresh)

    with pytest.raises(StoreError):
        blueprints.update(employment_blueprint.id, name="Employment", fields=[{"label": "Title"}])
