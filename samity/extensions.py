import threading

from flask_sqlalchemy import SQLAlchemy
from flask_login import LoginManager

db = SQLAlchemy()
login_manager = LoginManager()

# Single writer for every balance-changing operation
ledger_lock = threading.RLock()
