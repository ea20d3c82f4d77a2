"""Change detection between consecutive headline snapshots."""

from .models import FeedSnapshot


def has_changed(previous: FeedSnapshot | None, current: FeedSnapshot) -> bool:
    """Tell whether ``current`` differs from the stored snapshot.

    Comparison is by value over the ordered headlines. Without a stored
    snapshot there is nothing to compare against, so the answer is ``False``
    and the caller records ``current`` as the new baseline.
    """
    if previous is None:
        return False
    return previous != current
