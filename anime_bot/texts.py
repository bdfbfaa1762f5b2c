"""Centralized texts attached to outbound notifications."""

WELCOME_TEXT = (
    "This bot notifies you when new episodes of your favourite anime series go on air. "
    "Send a series title to subscribe, or type @ and the bot name in any chat to search."
)

WELCOME_BACK_TEXT = "Welcome back! Send a series title to subscribe or unsubscribe, /subscriptions to review your list."

CATALOG_TEXT = "Series list"
SUBSCRIPTIONS_TEXT = "Subscription list"

SUBSCRIBED_TEXT = "Subscription added"
UNSUBSCRIBED_TEXT = "Subscription removed"

# Error reasons
NOT_FOUND_REASON = "not found"
ALREADY_SUBSCRIBED_REASON = "already subscribed"
NOT_SUBSCRIBED_REASON = "not subscribed"
