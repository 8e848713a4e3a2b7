import os


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'change-me-samity-secret-key'
    # Relative sqlite paths are placed in the Flask instance folder
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///samity.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    SEED_DEMO_DATA = os.environ.get('SEED_DEMO_DATA', '1') == '1'

    # Society-wide parameters used until an admin changes them
    DEFAULT_SETTINGS = {
        'interestRate': 6.0,
        'sharePrice': 100.0,
        'maxLoanAmount': 500000.0,
        'loanInterestRate': 12.0,
    }

    # Business rules
    MIN_LOAN_DURATION = 1
    MAX_LOAN_DURATION = 60
    MIN_PHONE_LENGTH = 11
    DEFAULT_MEMBER_PASSWORD = '1234'


class TestingConfig(Config):
    TESTING = True
    SQLALCHEMY_DATABASE_URI = 'sqlite://'
    SEED_DEMO_DATA = False
    LOG_LEVEL = 'WARNING'
