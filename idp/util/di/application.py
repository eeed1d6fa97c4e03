"""Application layer DI providers."""

from dishka import Scope, provide

from idp.application.gate import ApiKeyGate
from idp.application.usecase.api_key import (
    CreateApiKeyUseCase,
    DeleteApiKeyUseCase,
    GetApiKeyUseCase,
    ListApiKeysUseCase,
    ListScopesUseCase,
    RegenerateApiKeyUseCase,
    ToggleApiKeyUseCase,
    UpdateApiKeyUseCase,
)
from idp.application.usecase.auth import (
    ChangeEmailUseCase,
    ChangePasswordUseCase,
    ExternalLoginUseCase,
    ForceAuthUseCase,
    GetCurrentUserUseCase,
    LinkEmailUseCase,
    LinkExternalUseCase,
    LinkPhoneUseCase,
    ListExternalLoginsUseCase,
    LoginUseCase,
    RegisterUseCase,
    RequestEmailChangeUseCase,
    ResetPasswordUseCase,
    SendOtpUseCase,
    SendPasswordResetUseCase,
    UnlinkExternalUseCase,
    ValidateTokenUseCase,
    VerifyOtpUseCase,
)
from idp.config import AuthSettings
from idp.domain.service import ApiKeyService, IdentityService, JWTService, OtpService
from idp.util.di.base import ProviderBase


class ProdApplicationProvider(ProviderBase):
    """Production application use cases provider - concrete, no mocks needed."""

    scope = Scope.REQUEST

    # Password and OTP sign-in
    @provide
    def get_register_use_case(
        self, identity_service: IdentityService, jwt_service: JWTService
    ) -> RegisterUseCase:
        return RegisterUseCase(identity_service=identity_service, jwt_service=jwt_service)

    @provide
    def get_login_use_case(
        self, identity_service: IdentityService, jwt_service: JWTService
    ) -> LoginUseCase:
        return LoginUseCase(identity_service=identity_service, jwt_service=jwt_service)

    @provide
    def get_send_otp_use_case(self, otp_service: OtpService) -> SendOtpUseCase:
        return SendOtpUseCase(otp_service=otp_service)

    @provide
    def get_verify_otp_use_case(
        self,
        otp_service: OtpService,
        identity_service: IdentityService,
        jwt_service: JWTService,
    ) -> VerifyOtpUseCase:
        return VerifyOtpUseCase(
            otp_service=otp_service,
            identity_service=identity_service,
            jwt_service=jwt_service,
        )

    # Credential linking
    @provide
    def get_link_phone_use_case(
        self, identity_service: IdentityService, jwt_service: JWTService
    ) -> LinkPhoneUseCase:
        return LinkPhoneUseCase(
            identity_service=identity_service, jwt_service=jwt_service
        )

    @provide
    def get_link_email_use_case(
        self, identity_service: IdentityService, jwt_service: JWTService
    ) -> LinkEmailUseCase:
        return LinkEmailUseCase(
            identity_service=identity_service, jwt_service=jwt_service
        )

    @provide
    def get_link_external_use_case(
        self, identity_service: IdentityService
    ) -> LinkExternalUseCase:
        return LinkExternalUseCase(identity_service=identity_service)

    @provide
    def get_unlink_external_use_case(
        self, identity_service: IdentityService
    ) -> UnlinkExternalUseCase:
        return UnlinkExternalUseCase(identity_service=identity_service)

    @provide
    def get_list_external_logins_use_case(
        self, identity_service: IdentityService
    ) -> ListExternalLoginsUseCase:
        return ListExternalLoginsUseCase(identity_service=identity_service)

    # Trusted server-to-server
    @provide
    def get_external_login_use_case(
        self,
        identity_service: IdentityService,
        jwt_service: JWTService,
        auth_settings: AuthSettings,
    ) -> ExternalLoginUseCase:
        return ExternalLoginUseCase(
            identity_service=identity_service,
            jwt_service=jwt_service,
            auth_settings=auth_settings,
        )

    @provide
    def get_force_auth_use_case(
        self,
        identity_service: IdentityService,
        jwt_service: JWTService,
        auth_settings: AuthSettings,
    ) -> ForceAuthUseCase:
        return ForceAuthUseCase(
            identity_service=identity_service,
            jwt_service=jwt_service,
            auth_settings=auth_settings,
        )

    # Tokens and account
    @provide
    def get_validate_token_use_case(
        self, jwt_service: JWTService
    ) -> ValidateTokenUseCase:
        return ValidateTokenUseCase(jwt_service=jwt_service)

    @provide
    def get_current_user_use_case(
        self, identity_service: IdentityService
    ) -> GetCurrentUserUseCase:
        return GetCurrentUserUseCase(identity_service=identity_service)

    @provide
    def get_change_password_use_case(
        self, identity_service: IdentityService
    ) -> ChangePasswordUseCase:
        return ChangePasswordUseCase(identity_service=identity_service)

    @provide
    def get_request_email_change_use_case(
        self, identity_service: IdentityService
    ) -> RequestEmailChangeUseCase:
        return RequestEmailChangeUseCase(identity_service=identity_service)

    @provide
    def get_change_email_use_case(
        self, identity_service: IdentityService, jwt_service: JWTService
    ) -> ChangeEmailUseCase:
        return ChangeEmailUseCase(
            identity_service=identity_service, jwt_service=jwt_service
        )

    @provide
    def get_send_password_reset_use_case(
        self, otp_service: OtpService
    ) -> SendPasswordResetUseCase:
        return SendPasswordResetUseCase(otp_service=otp_service)

    @provide
    def get_reset_password_use_case(
        self, identity_service: IdentityService
    ) -> ResetPasswordUseCase:
        return ResetPasswordUseCase(identity_service=identity_service)

    # API key administration
    @provide
    def get_api_key_gate(
        self, api_key_service: ApiKeyService, jwt_service: JWTService
    ) -> ApiKeyGate:
        return ApiKeyGate(api_key_service=api_key_service, jwt_service=jwt_service)

    @provide
    def get_list_api_keys_use_case(
        self, api_key_service: ApiKeyService
    ) -> ListApiKeysUseCase:
        return ListApiKeysUseCase(api_key_service=api_key_service)

    @provide
    def get_get_api_key_use_case(self, api_key_service: ApiKeyService) -> GetApiKeyUseCase:
        return GetApiKeyUseCase(api_key_service=api_key_service)

    @provide
    def get_create_api_key_use_case(
        self, api_key_service: ApiKeyService
    ) -> CreateApiKeyUseCase:
        return CreateApiKeyUseCase(api_key_service=api_key_service)

    @provide
    def get_update_api_key_use_case(
        self, api_key_service: ApiKeyService
    ) -> UpdateApiKeyUseCase:
        return UpdateApiKeyUseCase(api_key_service=api_key_service)

    @provide
    def get_toggle_api_key_use_case(
        self, api_key_service: ApiKeyService
    ) -> ToggleApiKeyUseCase:
        return ToggleApiKeyUseCase(api_key_service=api_key_service)

    @provide
    def get_regenerate_api_key_use_case(
        self, api_key_service: ApiKeyService
    ) -> RegenerateApiKeyUseCase:
        return RegenerateApiKeyUseCase(api_key_service=api_key_service)

    @provide
    def get_delete_api_key_use_case(
        self, api_key_service: ApiKeyService
    ) -> DeleteApiKeyUseCase:
        return DeleteApiKeyUseCase(api_key_service=api_key_service)

    @provide(scope=Scope.APP)
    def get_list_scopes_use_case(self) -> ListScopesUseCase:
        return ListScopesUseCase()
