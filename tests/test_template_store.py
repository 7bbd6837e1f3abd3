import pytest

from studio.cache import build_template_key
from studio.domain.timeline.errors import InvalidTemplateError, NoTemplateError
from studio.domain.timeline.schemas import TimelineTemplateIn
from studio.domain.timeline.template_store import TemplateStore
from studio.models import TimelineTemplate

from .conftest import PORTRAIT, portrait_template


@pytest.fixture
def store(db, cache):
    return TemplateStore(db, cache)


def test_put_template_sorts_tasks_and_defaults_name(store):
    data = portrait_template()
    data["tasks"] = list(reversed(data["tasks"]))

    saved = store.put_template(data)

    assert saved.templateName == "Portrait Session Standard Timeline"
    assert [t.order for t in saved.tasks] == [1, 2, 3, 4, 5, 6, 7]
    assert store.get_template(PORTRAIT).tasks[0].name == "Contract & payment confirmed"


def test_put_template_accepts_model(store):
    template = TimelineTemplateIn.model_validate({**portrait_template(), "templateName": "Portraits"})

    saved = store.put_template(template)

    assert saved.templateName == "Portraits"


def test_put_template_replaces_existing(store):
    store.put_template(portrait_template())
    replacement = portrait_template()
    replacement["tasks"] = replacement["tasks"][:2]

    store.put_template(replacement)

    assert len(store.get_template(PORTRAIT).tasks) == 2
    assert len(store.list_templates()) == 1


@pytest.mark.parametrize(
    "mutate, fragment",
    [
        (lambda t: t.update(tasks=[]), "at least one task"),
        (lambda t: t["tasks"][1].update(order=1), "unique"),
        (lambda t: t["tasks"][0].update(estimatedHours=-1), "negative"),
        (lambda t: t["tasks"][0].update(estimatedHours=float("nan")), "finite"),
        (lambda t: t["tasks"][0].update(estimatedHours=float("inf")), "finite"),
        (lambda t: t["tasks"][0].update(offsetDays=10**7), "less than or equal to 3650"),
        (lambda t: t["tasks"][0].update(offsetDays=-3651), "greater than or equal to -3650"),
        (lambda t: t["tasks"][0].update(name="   "), "blank"),
        (lambda t: t.update(sessionType=""), "blank"),
    ],
)
def test_put_template_rejects_invalid(store, mutate, fragment):
    data = portrait_template()
    mutate(data)

    with pytest.raises(InvalidTemplateError) as exc_info:
        store.put_template(data)

    assert fragment in exc_info.value.message
    assert store.list_templates() == []


def test_require_template_raises_for_unknown_type(store):
    assert store.get_template("Wedding") is None
    with pytest.raises(NoTemplateError):
        store.require_template("Wedding")


def test_get_template_is_served_from_cache(store, cache, db):
    store.put_template(portrait_template())
    store.get_template(PORTRAIT)

    assert cache.get(build_template_key(PORTRAIT)) is not None

    # A fresh store over the same cache does not need the row
    db.execute(TimelineTemplate.__table__.delete())
    db.commit()
    assert TemplateStore(db, cache).get_template(PORTRAIT).sessionType == PORTRAIT


def test_put_and_delete_invalidate_cache(store, cache):
    store.put_template(portrait_template())
    store.get_template(PORTRAIT)

    shorter = portrait_template()
    shorter["tasks"] = shorter["tasks"][:3]
    store.put_template(shorter)
    assert len(store.get_template(PORTRAIT).tasks) == 3

    store.delete_template(PORTRAIT)
    assert cache.get(build_template_key(PORTRAIT)) is None
    assert store.get_template(PORTRAIT) is None


def test_delete_unknown_template(store):
    with pytest.raises(NoTemplateError):
        store.delete_template("Wedding")


def test_list_templates_sorted_by_session_type(store):
    for session_type in ["Portrait Session", "Branding Session", "Family Session"]:
        store.put_template({**portrait_template(), "sessionType": session_type})

    assert [t.sessionType for t in store.list_templates()] == [
        "Branding Session",
        "Family Session",
        "Portrait Session",
    ]


def test_offsets_at_the_limit_are_accepted(store):
    data = portrait_template()
    data["tasks"][0]["offsetDays"] = -3650
    data["tasks"][-1]["offsetDays"] = 3650

    saved = store.put_template(data)

    assert [saved.tasks[0].offsetDays, saved.tasks[-1].offsetDays] == [-3650, 3650]


def test_session_type_lookups_ignore_surrounding_whitespace(store):
    store.put_template({**portrait_template(), "sessionType": "  Portrait Session\t"})

    assert store.get_template(PORTRAIT).sessionType == PORTRAIT
    assert store.get_template(" Portrait Session ").sessionType == PORTRAIT

    store.delete_template("Portrait Session ")
    assert store.get_template(PORTRAIT) is None
