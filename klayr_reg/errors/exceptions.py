"""
Custom exception classes for klayr-reg
"""

class RegistrationError(Exception):
    """Base exception for registration operations"""
    def __init__(self, message: str, code: str = None):
        super().__init__(message)
        self.message = message
        self.code = code or "REGISTRATION_ERROR"

class ConfigurationError(RegistrationError):
    """Missing or invalid settings"""
    def __init__(self, message: str):
        super().__init__(message, "CONFIG_ERROR")

class ConnectivityError(RegistrationError):
    """No reachable endpoint for a chain"""
    def __init__(self, message: str):
        super().__init__(message, "CONNECTIVITY_ERROR")

class RPCError(RegistrationError):
    """The node answered a request with an error object"""
    def __init__(self, method: str, message: str, rpc_code: int = None):
        super().__init__(f"{method} failed: {message}", "RPC_ERROR")
        self.method = method
        self.rpc_code = rpc_code
        self.reason = message

class ValidatorResolutionError(RegistrationError):
    """Active or signable validator set is empty"""
    def __init__(self, message: str):
        super().__init__(message, "VALIDATOR_ERROR")

class SigningError(RegistrationError):
    """Signing or aggregation primitive failed"""
    def __init__(self, message: str):
        super().__init__(message, "SIGNING_ERROR")

class FeeNegotiationError(RegistrationError):
    """Minimum fee could not be determined"""
    def __init__(self, message: str):
        super().__init__(message, "FEE_ERROR")

class SubmissionError(RegistrationError):
    """Transaction pool rejected the transaction"""
    def __init__(self, reason: str):
        super().__init__(f"Transaction rejected: {reason}", "SUBMISSION_ERROR")
        self.reason = reason

class AuthorizationError(RegistrationError):
    """Chain connector authorization failed"""
    def __init__(self, message: str):
        super().__init__(message, "AUTH_ERROR")

class CodecError(RegistrationError):
    """Object does not match its schema"""
    def __init__(self, message: str):
        super().__init__(message, "CODEC_ERROR")

class KeystoreError(RegistrationError):
    """Keystore file is malformed"""
    def __init__(self, message: str):
        super().__init__(message, "KEYSTORE_ERROR")
