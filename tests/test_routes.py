from flask import session

from src.core.constants import PERMISSOES_ADMIN
from src.core.extensions import chave_do_limite


def test_health_check(client):
    """Teste da rota de health check."""
    response = client.get('/health')
    assert response.status_code == 200
    assert "Servidor Oficina do Aluno no ar!" in response.data.decode('utf-8')


def test_404_em_json(client):
    """Rotas inexistentes devolvem JSON com a mensagem em português."""
    response = client.get('/rota-que-nao-existe')
    assert response.status_code == 404
    assert response.get_json()['error'] == "Página não encontrada"


def test_405_em_json(client):
    response = client.get('/logout')
    assert response.status_code == 405
    assert response.get_json()['error'] == "Método não permitido"


def test_admin_sem_login(client):
    response = client.get('/admin/alunos')
    assert response.status_code == 401


def test_professor_sem_login(client):
    assert client.get('/professor/painel').status_code == 401


def test_professor_nao_entra_no_admin(professor_client):
    response = professor_client.get('/admin/painel')
    assert response.status_code == 403


def test_admin_nao_entra_no_painel_do_professor(admin_client):
    assert admin_client.get('/professor/painel').status_code == 403


def test_secao_sem_permissao(cliente_logado):
    permissoes = {p: False for p in PERMISSOES_ADMIN}
    permissoes['canAccessStudents'] = True
    cliente = cliente_logado({
        'uid': 'sec-2', 'nome': 'Recepção', 'email': 'recepcao@oficinadoaluno.com.br',
        'papel': 'admin', 'permissoes': permissoes,
    })

    assert cliente.get('/admin/alunos').status_code == 200
    response = cliente.get('/admin/financeiro/resumo')
    assert response.status_code == 403
    assert 'permissão' in response.get_json()['error']


def test_painel_admin_vazio(admin_client):
    response = admin_client.get('/admin/painel')
    assert response.status_code == 200
    dados = response.get_json()
    assert dados['counts']['enrolledStudents'] == 0
    assert dados['notifications'] == []


def test_limite_conta_por_usuario(app):
    with app.test_request_context('/login', environ_base={'REMOTE_ADDR': '10.0.0.7'}):
        assert chave_do_limite() == '10.0.0.7'
        session['usuario'] = {'uid': 'admin-1'}
        assert chave_do_limite() == 'admin-1'
