"""
ORDERS App - Production progress view

The customer-facing 11-step tracker derived from the order status.
"""

from orders.models import OrderStatus

PRODUCTION_STEPS = (
    (OrderStatus.PENDING, 'Order Received'),
    (OrderStatus.APPROVED, 'Approved'),
    (OrderStatus.DESIGNING, 'Designing'),
    (OrderStatus.LASER_CUTTING, 'Laser Cutting'),
    (OrderStatus.METAL_BENDING, 'Metal Bending'),
    (OrderStatus.FABRICATION_WELDING, 'Fabrication (Welding)'),
    (OrderStatus.FINISHING, 'Finishing'),
    (OrderStatus.POWDER_COATING, 'Powder Coating'),
    (OrderStatus.ASSEMBLING, 'Assembling'),
    (OrderStatus.QUALITY_CHECK, 'Quality Check'),
    (OrderStatus.DISPATCH, 'Dispatch'),
)

_STEP_INDEX = {status: number for number, (status, _) in enumerate(PRODUCTION_STEPS, start=1)}

# Orders that never entered production stay on the first step
_NOT_STARTED = {OrderStatus.PENDING, OrderStatus.REJECTED, OrderStatus.CANCELLED}


def current_step(status: str) -> int:
    if status == OrderStatus.COMPLETED:
        return len(PRODUCTION_STEPS)
    return _STEP_INDEX.get(status, 1)


def production_progress(status: str) -> dict:
    current = current_step(status)
    steps = []
    for number, (step_status, title) in enumerate(PRODUCTION_STEPS, start=1):
        if number == 1:
            completed = True
        elif number == 2:
            completed = status not in _NOT_STARTED
        else:
            completed = status == OrderStatus.COMPLETED or (
                status not in _NOT_STARTED and current >= number
            )
        steps.append({
            'step': number,
            'status': step_status.value,
            'title': title,
            'completed': completed,
            'current': number == current,
        })
    return {
        'current_step': current,
        'total_steps': len(PRODUCTION_STEPS),
        'steps': steps,
    }
