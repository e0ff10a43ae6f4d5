import datetime

from hexdelve import db


class WorldInstance(db.Model):
    """A generated world as stored: only the seed, terrain is regenerated on load."""

    __tablename__ = "world_instances"
    id = db.Column(db.Integer, primary_key=True)
    seed = db.Column(db.BigInteger, nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.datetime.utcnow)
    updated_at = db.Column(db.DateTime, default=datetime.datetime.utcnow, onupdate=datetime.datetime.utcnow)

    def __repr__(self):
        return f"<WorldInstance {self.id} seed={self.seed}>"
