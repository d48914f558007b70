"""Linear fulfilment progress of an order, as shown on the admin order page"""

PROGRESS_STEPS = ('pending', 'processing', 'shipped', 'delivered', 'paid')
TERMINAL_STATUSES = ('cancelled', 'returned', 'fake', 'refunded')


def order_progress(status):
    """
    Position of ``status`` on the fulfilment track.

    pending_verification sits on the first step. Terminal statuses (and
    statuses not on the track) have no position: currentIndex is -1.
    """
    if status in TERMINAL_STATUSES:
        index = -1
    elif status == 'pending_verification':
        index = 0
    elif status in PROGRESS_STEPS:
        index = PROGRESS_STEPS.index(status)
    else:
        index = -1

    percentage = index / (len(PROGRESS_STEPS) - 1) * 100 if index >= 0 else 0
    return {
        'steps': list(PROGRESS_STEPS),
        'currentIndex': index,
        'isTerminal': status in TERMINAL_STATUSES,
        'percentage': round(percentage, 2),
    }
