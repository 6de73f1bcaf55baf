"""
Script Utilitário: setup_admin.py
Use este script para dar acesso administrativo completo a um usuário
que já existe no Firebase Authentication (pelo uid).
"""

import sys

from src import create_app
from src.core.constants import COLECAO_COLABORADORES, PERMISSOES_ADMIN
from src.core.database import get_db
from src.core.models import decodificar_acesso_sistema

# Inicializa a aplicação para carregar configurações e banco de dados
app = create_app()

def promover_usuario(uid, nome=None):
    print(f"--- Promovendo usuário: {uid} ---")

    # Precisamos do contexto da aplicação para acessar o Firestore corretamente
    with app.app_context():
        doc_ref = get_db().collection(COLECAO_COLABORADORES).document(uid)
        doc = doc_ref.get()
        dados = doc.to_dict() if doc.exists else {}

        acesso = decodificar_acesso_sistema(dados.get('systemAccess'))
        if 'admin' not in acesso:
            acesso.append('admin')

        doc_ref.set({
            'name': dados.get('name') or nome or uid,
            'role': dados.get('role') or 'Administrador',
            'systemAccess': acesso,
            'adminPermissions': {p: True for p in PERMISSOES_ADMIN},
        }, merge=True)

        print(f"SUCESSO! O usuário '{uid}' agora é um ADMIN (acesso: {acesso}).")
        print("IMPORTANTE: Para que a mudança surta efeito, faça LOGOUT e LOGIN novamente.")

if __name__ == "__main__":
    if len(sys.argv) > 1:
        uid_alvo = sys.argv[1]
    else:
        uid_alvo = input("Digite o uid (Firebase Authentication) do usuário que será Admin: ").strip()
    if not uid_alvo:
        sys.exit("Nenhum uid informado.")
    promover_usuario(uid_alvo)
