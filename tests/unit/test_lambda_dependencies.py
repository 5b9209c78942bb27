"""Unit tests for the cached Lambda dependencies."""

import os
from collections.abc import Iterator
from unittest.mock import Mock, patch

import pytest

import src.lambda_dependencies as deps
from src.lambda_dependencies import (
    get_dynamodb_resource,
    get_fastapi_app,
    get_menu_repository,
    get_token_validator,
    initialize_lambda_environment,
)


def _reset_caches() -> None:
    deps._dynamodb_resource = None
    deps._menu_repository = None
    deps._token_validator = None
    deps._fastapi_app = None


@pytest.fixture
def boto3_resource() -> Iterator[Mock]:
    _reset_caches()
    with patch("src.lambda_dependencies.boto3.resource") as resource:
        yield resource
    _reset_caches()


@pytest.mark.unit
class TestGetDynamoDBResource:
    """DynamoDB resource selection."""

    @patch.dict(os.environ, {"AWS_REGION": "ap-southeast-2"}, clear=True)
    def test_regional_resource(self, boto3_resource: Mock) -> None:
        assert get_dynamodb_resource() is boto3_resource.return_value
        boto3_resource.assert_called_once_with("dynamodb", region_name="ap-southeast-2")

    @patch.dict(
        os.environ,
        {
            "DYNAMODB_ENDPOINT": "http://dynamodb-local:8000",
            "AWS_ACCESS_KEY_ID": "local-key",
            "AWS_SECRET_ACCESS_KEY": "local-secret",
        },
        clear=True,
    )
    def test_local_endpoint_uses_exported_credentials(self, boto3_resource: Mock) -> None:
        get_dynamodb_resource()

        boto3_resource.assert_called_once_with(
            "dynamodb",
            region_name="us-east-1",
            endpoint_url="http://dynamodb-local:8000",
            aws_access_key_id="local-key",
            aws_secret_access_key="local-secret",
        )

    @patch.dict(os.environ, {}, clear=True)
    def test_warm_invocations_reuse_resource(self, boto3_resource: Mock) -> None:
        assert get_dynamodb_resource() is get_dynamodb_resource()
        assert boto3_resource.call_count == 1


@pytest.mark.unit
class TestGetTokenValidator:
    """Tests for get_token_validator function."""

    def teardown_method(self) -> None:
        _reset_caches()

    @patch.dict(os.environ, {"JWT_SECRET": "lambda-secret"}, clear=True)
    def test_creates_and_caches_validator(self) -> None:
        validator = get_token_validator()

        assert validator.secret == "lambda-secret"
        assert get_token_validator() is validator

    @patch.dict(os.environ, {}, clear=True)
    def test_raises_when_secret_missing(self) -> None:
        """Test that Lambda deployments must configure a signing secret."""
        with pytest.raises(ValueError, match="JWT_SECRET must be set"):
            get_token_validator()


@pytest.mark.unit
class TestGetFastAPIApp:
    """Tests for get_fastapi_app function."""

    def teardown_method(self) -> None:
        _reset_caches()

    @patch.dict(
        os.environ,
        {"JWT_SECRET": "lambda-secret", "DYNAMODB_MENU_TABLE": "menu-table"},
        clear=True,
    )
    @patch("src.lambda_dependencies.boto3.resource")
    def test_builds_app_once_with_shared_menu_repository(self, mock_boto3_resource: Mock) -> None:
        app = get_fastapi_app()

        assert get_fastapi_app() is app
        assert app.state.menu_service.menu_repository is get_menu_repository()
        assert app.state.order_service.menu_repository is get_menu_repository()
        assert get_menu_repository().table_name == "menu-table"


@pytest.mark.unit
class TestInitializeLambdaEnvironment:
    """Tests for initialize_lambda_environment function."""

    @patch.dict(os.environ, {"LOG_LEVEL": "DEBUG"}, clear=True)
    @patch("src.lambda_dependencies.configure_logging")
    def test_configures_logging(self, mock_configure_logging: Mock) -> None:
        """LOG_LEVEL is passed through to the JSON logging setup."""
        initialize_lambda_environment()

        mock_configure_logging.assert_called_once_with("DEBUG")
