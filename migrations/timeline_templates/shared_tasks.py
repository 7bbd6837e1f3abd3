"""
Shared Timeline Tasks
Task definitions reused across several session types
"""


def task(
    name,
    offset_days,
    order,
    can_automate=False,
    approval_required=False,
    estimated_hours=0.0,
    requires_human=True,
    can_batch=False,
):
    """Build one task definition in the stored template format"""
    return {
        "name": name,
        "offsetDays": offset_days,
        "order": order,
        "canAutomate": can_automate,
        "approvalRequired": approval_required,
        "estimatedHours": estimated_hours,
        "requiresHuman": requires_human,
        "canBatch": can_batch,
    }


def get_contract_confirmed_task(offset_days=-14):
    """Contract signed and deposit received (always first)"""
    return task(
        "Contract & payment confirmed",
        offset_days,
        1,
        can_automate=True,
        estimated_hours=0.5,
        requires_human=False,
        can_batch=True,
    )


def get_session_day_task(name, order, estimated_hours):
    """The shoot itself, always on the session date"""
    return task(name, 0, order, estimated_hours=estimated_hours)


def get_consultation_call_task(name, offset_days, order, estimated_hours=0.5):
    return task(name, offset_days, order, estimated_hours=estimated_hours)


def get_editing_task(name, order, estimated_hours, offset_days=2):
    return task(name, offset_days, order, estimated_hours=estimated_hours, can_batch=True)


def get_gallery_delivery_task(name, offset_days, order, estimated_hours=0.5):
    """Automated gallery hand-off to the client"""
    return task(
        name,
        offset_days,
        order,
        can_automate=True,
        estimated_hours=estimated_hours,
        requires_human=False,
        can_batch=True,
    )


def get_guide_task(name, offset_days, order, estimated_hours=1.0, requires_human=False, can_batch=True):
    """AI-drafted client guide that a human reviews before it goes out"""
    return task(
        name,
        offset_days,
        order,
        can_automate=True,
        approval_required=True,
        estimated_hours=estimated_hours,
        requires_human=requires_human,
        can_batch=can_batch,
    )
