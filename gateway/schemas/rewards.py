from gateway.schemas.common import RequestModel, ResponseModel


class WithdrawRequest(RequestModel):
    link: str
    witness: str


class WithdrawResponse(ResponseModel):
    txid: str
    link: str
    witness: str
    hex_witness: str


class EncodeSupportRequest(RequestModel):
    link: str


class EncodeSupportResponse(ResponseModel):
    address: str
    link: str
    encoded_data: str


class EncodeDepositRequest(RequestModel):
    link: str
    witness: str


class EncodeDepositResponse(ResponseModel):
    address: str
    link: str
    witness: str
    encoded_data: str


class SupportRequest(RequestModel):
    raw_tx: str
    link: str
    address: str
    user: str
    token: str


class SupportResponse(ResponseModel):
    txid: str
    link: str
    address: str
    user_profile_name: str
    user: str


class DepositRequest(RequestModel):
    raw_tx: str
    link: str
    witness: str
    address: str
    user: str
    token: str
    witness_name: str | None = None


class DepositResponse(ResponseModel):
    txid: str
    link: str
    witness: str
    address: str
    user_profile_name: str
    user: str
