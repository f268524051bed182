from gateway.schemas.common import RequestModel, ResponseModel


class CheckAccountRequest(RequestModel):
    user: str


class CheckAccountResponse(ResponseModel):
    exists: bool
    pending: bool | None = None


class CheckWalletAddressRequest(RequestModel):
    user: str
    wallet_address: str


class CheckWalletAddressResponse(ResponseModel):
    ok: bool
    user: str
    wallet_address: str
    address: str


class UserEntry(ResponseModel):
    user_address: str
    user_account: str
    user_name: str


class UsersResponse(ResponseModel):
    users_list: list[UserEntry]


class OwnedAddressRequest(RequestModel):
    address: str
    user: str
    token: str


class AccessTokenResponse(ResponseModel):
    access_token: str
    address: str
    user: str


class RegisterResponse(ResponseModel):
    user: str
    address: str
    hex_address: str
    user_profile_name: str
    txid: str
