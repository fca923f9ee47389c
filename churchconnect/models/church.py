from churchconnect.extensions import db
from churchconnect.utils.dates import isoformat
from .enums import SubscriptionTier


class Church(db.Model):
    __tablename__ = "churches"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False)
    subdomain = db.Column(db.String(50), unique=True, nullable=True)
    logo_url = db.Column(db.Text, nullable=True)
    banner_url = db.Column(db.Text, nullable=True)
    brand_color = db.Column(db.String(7), nullable=True, default="#6366f1")
    subscription_tier = db.Column(
        db.String(20), nullable=False, default=SubscriptionTier.TRIAL.value
    )
    trial_start_date = db.Column(db.TIMESTAMP(timezone=True), nullable=True)
    trial_end_date = db.Column(db.TIMESTAMP(timezone=True), nullable=True)
    subscription_start_date = db.Column(db.TIMESTAMP(timezone=True), nullable=True)
    max_members = db.Column(db.Integer, nullable=False, default=100)
    stripe_customer_id = db.Column(db.String(255), nullable=True)
    stripe_subscription_id = db.Column(db.String(255), nullable=True)
    kiosk_mode_enabled = db.Column(db.Boolean, nullable=False, default=False)
    kiosk_session_timeout = db.Column(db.Integer, nullable=False, default=60)
    kiosk_session_start_time = db.Column(db.TIMESTAMP(timezone=True), nullable=True)
    created_at = db.Column(
        db.TIMESTAMP(timezone=True), nullable=False, server_default=db.func.now()
    )
    updated_at = db.Column(
        db.TIMESTAMP(timezone=True),
        nullable=False,
        server_default=db.func.now(),
        onupdate=db.func.now(),
    )

    @property
    def is_suspended(self):
        return self.subscription_tier == SubscriptionTier.SUSPENDED.value

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "subdomain": self.subdomain,
            "logoUrl": self.logo_url,
            "bannerUrl": self.banner_url,
            "brandColor": self.brand_color,
            "subscriptionTier": self.subscription_tier,
            "trialStartDate": isoformat(self.trial_start_date),
            "trialEndDate": isoformat(self.trial_end_date),
            "subscriptionStartDate": isoformat(self.subscription_start_date),
            "maxMembers": self.max_members,
            "kioskModeEnabled": self.kiosk_mode_enabled,
            "kioskSessionTimeout": self.kiosk_session_timeout,
            "kioskSessionStartTime": isoformat(self.kiosk_session_start_time),
            "createdAt": isoformat(self.created_at),
            "updatedAt": isoformat(self.updated_at),
        }

    def __repr__(self):
        return f"Church(id={self.id}, name='{self.name}', tier={self.subscription_tier})"
