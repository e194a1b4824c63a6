# models/__init__.py
"""
Importações dos modelos em ordem correta para evitar problemas de relacionamento.
"""

# Importa Base do db.py
from db import Base

# 1. Modelos independentes
from .usuario import Usuario, TipoUsuario
from .academia import Academia

# 2. Modelos de associação
from .usuario_academia import UsuarioAcademia

# 3. Sessão do servidor
from .sessao import SessaoServidor

__all__ = [
    "Base",
    "Usuario",
    "TipoUsuario",
    "Academia",
    "UsuarioAcademia",
    "SessaoServidor",
]
