from venered.realtime.subscription import EventSelector, RowFilter, SubscriptionManager

__all__ = ["EventSelector", "RowFilter", "SubscriptionManager"]
