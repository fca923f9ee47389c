#!/usr/bin/env python3
"""Development server. Production runs ``churchconnect:create_app()`` under a WSGI server."""
import os

from churchconnect import create_app, db

app = create_app()

if os.getenv("AUTO_CREATE_TABLES", "true").lower() == "true":
    with app.app_context():
        db.create_all()
        app.logger.info(f"Database ready ({len(db.metadata.tables)} tables)")

if __name__ == "__main__":
    app.run(
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", 5000)),
        debug=os.getenv("FLASK_DEBUG", "false").lower() == "true",
    )
