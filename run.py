import os, socket
from urllib.parse import urlparse
from casmanager import create_app


app = create_app()

def _desired_host_port():
    base = os.getenv("BASE_URL", "http://localhost:3000")
    u = urlparse(base)
    scheme = u.scheme or "http"
    public_host = u.hostname or "localhost"
    public_port = u.port or (443 if scheme == "https" else 3000)
    # Bind 127.0.0.1 for localhost; otherwise bind all interfaces so reverse proxy can reach us
    bind_host = os.getenv("HOST") or ("127.0.0.1" if public_host in ("localhost", "127.0.0.1") else "0.0.0.0")
    port = int(os.getenv("PORT") or public_port)
    return bind_host, port, scheme, public_host, public_port

if __name__ == "__main__":
    bind_host, port, scheme, public_host, public_port = _desired_host_port()

    external_url = os.getenv("BASE_URL", f"{scheme}://{public_host}:{public_port}")
    print(f" * Open {external_url}")
    print(f" * CAS login at {external_url}/cas/login")
    if bind_host == "0.0.0.0":
        try:
            ip = socket.gethostbyname(socket.gethostname())
            print(f" * Also reachable on http://{ip}:{port}")
        except OSError:
            pass

    app.run(host=bind_host, port=port)
