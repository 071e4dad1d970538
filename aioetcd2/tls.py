from typing import Union, Optional, List
import ssl

class Certificate:
    '''
    An in-memory root certificate, the caller is in charge of reading it
    '''
    def __init__(self, cadata: Union[str, bytes]) -> None:
        self.cadata = cadata

    @classmethod
    def from_pem(cls, pem: Union[str, bytes]) -> 'Certificate':
        if isinstance(pem, bytes):
            pem = pem.decode('ascii')
        if '-----BEGIN CERTIFICATE-----' not in pem:
            raise ValueError('not a PEM encoded certificate')
        return cls(pem)

    @classmethod
    def from_der(cls, der: bytes) -> 'Certificate':
        if not der:
            raise ValueError('empty DER certificate')
        return cls(bytes(der))

    def load_into(self, context: ssl.SSLContext) -> None:
        context.load_verify_locations(cadata=self.cadata)

class Identity:
    '''
    A client certificate chain and its private key.

    The ssl module only loads key material from files, so an identity
    names them instead of holding the bytes.
    '''
    def __init__(self, certfile: str, keyfile: Optional[str]=None, password: Optional[str]=None) -> None:
        self.certfile = certfile
        self.keyfile = keyfile
        self.password = password

    def load_into(self, context: ssl.SSLContext) -> None:
        context.load_cert_chain(
            self.certfile, self.keyfile,
            password=self.password)

def create_ssl_context(root_certificates: List[Certificate],
                       identity: Optional[Identity]=None,
                       ssl_context: Optional[ssl.SSLContext]=None) -> ssl.SSLContext:
    if ssl_context is None:
        ssl_context = ssl.create_default_context(
            purpose=ssl.Purpose.SERVER_AUTH)
    for cert in root_certificates:
        cert.load_into(ssl_context)
    if identity is not None:
        identity.load_into(ssl_context)
    return ssl_context
