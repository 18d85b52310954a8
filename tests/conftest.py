"""Pytest configuration and shared fixtures for Remote Transfer tests."""

import pytest

from src.config.settings import TransferSettings
from src.config.target import ConnectionTarget, Scheme
from src.utils.logging import get_logger


# Test constants
TEST_FTP_HOST = "ftp.example.com"
TEST_FTP_USER = "testuser"
TEST_FTP_PASS = "testpass"


@pytest.fixture(autouse=True)
def reset_app_logger():
    """Drop handlers installed by setup_logging so they never outlive a test."""
    yield
    logger = get_logger()
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


@pytest.fixture
def transfer_settings() -> TransferSettings:
    """Settings with a short deadline and no keyring access."""
    return TransferSettings(timeout=5, use_keyring=False)


@pytest.fixture
def ftp_target() -> ConnectionTarget:
    """FTP target on the default port."""
    return ConnectionTarget(
        scheme=Scheme.FTP,
        host=TEST_FTP_HOST,
        port=21,
        username=TEST_FTP_USER,
        password=TEST_FTP_PASS,
        remote_path="/docs/readme.txt",
    )


@pytest.fixture
def sftp_target() -> ConnectionTarget:
    """SFTP target on the default port."""
    return ConnectionTarget(
        scheme=Scheme.SFTP,
        host="sftp.example.com",
        port=22,
        username=TEST_FTP_USER,
        password=TEST_FTP_PASS,
        remote_path="/upload/report.csv",
    )
