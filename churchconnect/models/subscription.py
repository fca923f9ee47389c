from churchconnect.extensions import db
from churchconnect.utils.dates import isoformat


class Subscription(db.Model):
    __tablename__ = "subscriptions"

    id = db.Column(db.Integer, primary_key=True)
    church_id = db.Column(
        db.Integer, db.ForeignKey("churches.id", ondelete="CASCADE"), nullable=False
    )
    stripe_subscription_id = db.Column(db.String(255), unique=True, nullable=True)
    status = db.Column(db.String(20), nullable=False)
    plan_id = db.Column(db.String(50), nullable=False)
    current_period_start = db.Column(db.TIMESTAMP(timezone=True), nullable=True)
    current_period_end = db.Column(db.TIMESTAMP(timezone=True), nullable=True)
    cancel_at_period_end = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(
        db.TIMESTAMP(timezone=True), nullable=False, server_default=db.func.now()
    )
    updated_at = db.Column(
        db.TIMESTAMP(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "churchId": self.church_id,
            "stripeSubscriptionId": self.stripe_subscription_id,
            "status": self.status,
            "planId": self.plan_id,
            "currentPeriodStart": isoformat(self.current_period_start),
            "currentPeriodEnd": isoformat(self.current_period_end),
            "cancelAtPeriodEnd": self.cancel_at_period_end,
            "createdAt": isoformat(self.created_at),
            "updatedAt": isoformat(self.updated_at),
        }
