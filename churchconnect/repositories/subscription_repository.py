from churchconnect.extensions import db
from churchconnect.models import Subscription


class SubscriptionRepository:
    @staticmethod
    def save(subscription):
        db.session.add(subscription)
        db.session.commit()
        return subscription

    @staticmethod
    def find_by_stripe_id(stripe_subscription_id):
        return Subscription.query.filter_by(
            stripe_subscription_id=stripe_subscription_id
        ).first()

    @staticmethod
    def find_current_for_church(church_id):
        return (
            Subscription.query.filter_by(church_id=church_id)
            .order_by(Subscription.created_at.desc(), Subscription.id.desc())
            .first()
        )

    @staticmethod
    def get_all():
        return Subscription.query.all()
