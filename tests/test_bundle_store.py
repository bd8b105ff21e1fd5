import random
from dataclasses import replace
from datetime import date, datetime

import pytest
from sqlalchemy import func, select

from personaforge.middleware.error_handler import (
    NotFoundError,
    PersistenceFailedError,
    ValidationAPIError,
)
from personaforge.models import Identity, Persona, Tag, UsageAction, UsageLog, identity_tags
from personaforge.services.bundle_store import BundleStore
from personaforge.services.identity_source import normalize_identity
from personaforge.services.persona_engine import derive_personas

from conftest import RANDOMUSER_RECORD, make_record

TODAY = date(2026, 10, 18)


def make_bundle(record=RANDOMUSER_RECORD, seed=0):
    identity = normalize_identity(record, today=TODAY)
    return identity, derive_personas(identity, rng=random.Random(seed), today=TODAY)


def count(session, entity) -> int:
    return session.execute(select(func.count()).select_from(entity)).scalar_one()


@pytest.fixture
def store(db_session):
    return BundleStore(db_session)


@pytest.fixture
def stored(store, operator):
    identity, personas = make_bundle()
    return store.persist(identity, personas, operator.id)


def test_persist_writes_identity_personas_and_generated_log(store, stored, operator, db_session):
    assert stored.created_by == operator.id
    assert [p.platform for p in stored.personas] == ["Facebook", "Instagram", "Twitter", "LinkedIn"]
    assert stored.personas[0].details["platform"] == "Facebook"

    logs = db_session.query(UsageLog).filter(UsageLog.identity_id == stored.id).all()
    assert [log.action for log in logs] == [UsageAction.GENERATED.value]
    assert logs[0].operator_id == operator.id


def test_persist_rolls_back_when_a_persona_row_fails(store, operator, db_session):
    identity, personas = make_bundle()
    personas[3] = replace(personas[3], username=None)

    with pytest.raises(PersistenceFailedError):
        store.persist(identity, personas, operator.id)

    assert count(db_session, Identity) == 0
    assert count(db_session, Persona) == 0
    assert count(db_session, UsageLog) == 0


def test_duplicate_identity_id_is_persistence_failure(store, stored, operator, db_session):
    _, personas = make_bundle(seed=1)
    duplicate = replace(normalize_identity(RANDOMUSER_RECORD, today=TODAY), id=stored.id)

    with pytest.raises(PersistenceFailedError):
        store.persist(duplicate, personas, operator.id)

    assert count(db_session, Identity) == 1
    assert count(db_session, Persona) == 4


def test_persist_requires_one_persona_per_platform(store, operator, db_session):
    identity, personas = make_bundle()

    with pytest.raises(ValidationAPIError):
        store.persist(identity, personas[:3] + [personas[0]], operator.id)

    assert count(db_session, Identity) == 0


def test_other_owner_sees_not_found(store, stored, other_operator):
    with pytest.raises(NotFoundError) as foreign:
        store.get_for_owner(stored.id, other_operator.id)
    with pytest.raises(NotFoundError) as unknown:
        store.get_for_owner("00000000-0000-4000-8000-000000000000", other_operator.id)

    assert foreign.value.message == unknown.value.message
    assert foreign.value.status_code == unknown.value.status_code == 404


def test_record_view_appends_viewed(store, stored, operator):
    store.record_view(stored.id, operator.id)
    store.record_view(stored.id, operator.id)

    actions = [entry.action for entry in store.usage_history(stored.id, operator.id)]
    assert actions.count(UsageAction.VIEWED.value) == 2
    assert actions[-1] == UsageAction.GENERATED.value


def test_record_view_needs_ownership(store, stored, other_operator, db_session):
    with pytest.raises(NotFoundError):
        store.record_view(stored.id, other_operator.id)

    assert count(db_session, UsageLog) == 1


def test_attach_tag_is_idempotent(store, stored, operator, db_session):
    first = store.attach_tag(stored.id, operator.id, "Suspect", "#FF0000")
    second = store.attach_tag(stored.id, operator.id, "Suspect", "#FF0000")

    assert first.id == second.id
    assert first.color == "#FF0000"
    assert count(db_session, Tag) == 1
    assert count(db_session, identity_tags) == 1

    tagged = db_session.query(UsageLog).filter(UsageLog.action == UsageAction.TAGGED.value).count()
    assert tagged == 1


def test_existing_tag_keeps_its_color(store, stored, operator):
    store.attach_tag(stored.id, operator.id, "Suspect", "#FF0000")
    tag = store.attach_tag(stored.id, operator.id, "Suspect", "#00FF00")

    assert tag.color == "#FF0000"


def test_tag_defaults_color(store, stored, operator):
    tag = store.attach_tag(stored.id, operator.id, "Review")

    assert tag.color == "#3B82F6"


@pytest.mark.parametrize("name,color", [("", None), ("   ", None), ("Ok", "red")])
def test_attach_tag_validates_input(store, stored, operator, name, color):
    with pytest.raises(ValidationAPIError):
        store.attach_tag(stored.id, operator.id, name, color)


def test_attach_tag_needs_ownership(store, stored, other_operator, db_session):
    with pytest.raises(NotFoundError):
        store.attach_tag(stored.id, other_operator.id, "Suspect")

    assert count(db_session, identity_tags) == 0


def test_delete_cascades_without_orphans(store, stored, operator, db_session):
    store.attach_tag(stored.id, operator.id, "Suspect")
    store.record_view(stored.id, operator.id)
    identity_id = stored.id

    store.delete_bundle(identity_id, operator.id)

    assert count(db_session, Identity) == 0
    assert count(db_session, Persona) == 0
    assert count(db_session, UsageLog) == 0
    assert count(db_session, identity_tags) == 0
    # Tags outlive the identities they label
    assert count(db_session, Tag) == 1

    with pytest.raises(NotFoundError):
        store.record_view(identity_id, operator.id)


def test_delete_needs_ownership(store, stored, other_operator, db_session):
    with pytest.raises(NotFoundError):
        store.delete_bundle(stored.id, other_operator.id)

    assert count(db_session, Identity) == 1


def test_list_filters_by_search_and_tag(store, operator, other_operator):
    emma = store.persist(*make_bundle(), operator.id)
    bob_record = make_record(
        name={"first": "Bob", "last": "Maes"},
        email="bob.maes@example.com",
        gender="male",
    )
    bob = store.persist(*make_bundle(bob_record), operator.id)
    store.persist(*make_bundle(), other_operator.id)
    store.attach_tag(bob.id, operator.id, "Suspect")

    rows, total = store.list_for_owner(operator.id)
    assert total == 2
    assert {row.id for row in rows} == {emma.id, bob.id}

    rows, total = store.list_for_owner(operator.id, search="JANSS")
    assert total == 1 and rows[0].id == emma.id

    rows, total = store.list_for_owner(operator.id, search="bob.maes@")
    assert total == 1 and rows[0].id == bob.id

    rows, total = store.list_for_owner(operator.id, tag="Suspect")
    assert total == 1
    assert [t.name for t in rows[0].tags] == ["Suspect"]
    assert len(rows[0].personas) == 4

    rows, total = store.list_for_owner(operator.id, search="%")
    assert total == 0


def test_list_pages_with_total(store, operator):
    for seed in range(3):
        store.persist(*make_bundle(seed=seed), operator.id)

    rows, total = store.list_for_owner(operator.id, limit=2, offset=0)
    more, _ = store.list_for_owner(operator.id, limit=2, offset=2)

    assert total == 3
    assert len(rows) == 2 and len(more) == 1
    assert {r.id for r in rows}.isdisjoint({r.id for r in more})


def test_list_is_newest_first_across_pages(store, operator, db_session):
    rows = [store.persist(*make_bundle(seed=seed), operator.id) for seed in range(3)]
    # Creation times out of insertion order
    stamps = [datetime(2026, 3, 1), datetime(2026, 1, 1), datetime(2026, 2, 1)]
    for row, stamp in zip(rows, stamps):
        row.created_at = stamp
    db_session.commit()
    expected = [rows[0].id, rows[2].id, rows[1].id]

    everything, _ = store.list_for_owner(operator.id)
    first_page, _ = store.list_for_owner(operator.id, limit=2, offset=0)
    second_page, _ = store.list_for_owner(operator.id, limit=2, offset=2)

    assert [r.id for r in everything] == expected
    assert [r.id for r in first_page + second_page] == expected


def test_search_folds_accented_names(store, operator):
    emilie = store.persist(
        *make_bundle(make_record(name={"first": "Émilie", "last": "Lefèvre"})),
        operator.id,
    )
    store.persist(*make_bundle(), operator.id)

    for needle in ("ÉMILIE", "émilie", "LEFÈVRE"):
        rows, total = store.list_for_owner(operator.id, search=needle)
        assert total == 1
        assert rows[0].id == emilie.id


def test_list_tags_alphabetical(store, stored, operator):
    store.attach_tag(stored.id, operator.id, "Watch")
    store.attach_tag(stored.id, operator.id, "Archive")

    assert [t.name for t in store.list_tags()] == ["Archive", "Watch"]
