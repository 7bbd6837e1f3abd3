from migrations.timeline_templates import get_portrait_template, get_standard_templates


def test_standard_templates_are_valid(service):
    for template in get_standard_templates():
        service.put_template(template)

    assert [t.sessionType for t in service.list_templates()] == [
        "Branding Session",
        "Executive Session",
        "Family Session",
        "Portrait Session",
    ]


def test_portrait_offsets():
    tasks = get_portrait_template()["tasks"]

    assert [t["order"] for t in tasks] == [1, 2, 3, 4, 5, 6, 7]
    assert [t["offsetDays"] for t in tasks] == [-14, -7, -3, 0, 2, 3, 7]
    assert [t["name"] for t in tasks if t["approvalRequired"]] == [
        "Style guide & preparation materials sent"
    ]
