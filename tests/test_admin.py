from unittest.mock import patch

import pytest


@pytest.fixture
def cadastros(db):
    db.inserir('students', 'a1', {'name': 'Bruno Lima', 'status': 'matricula', 'credits': 0.5})
    db.inserir('students', 'a2', {'name': 'Carla Dias', 'status': 'matricula', 'credits': 10})
    db.inserir('professionals', 'p1', {
        'name': 'Ana Souza', 'status': 'ativo', 'hourlyRateIndividual': 80,
        'availability': {'segunda': ['14:00', '15:00']},
    })
    return db


def aula_json(**extra):
    dados = {
        'aluno_id': 'a1', 'profissional_id': 'p1', 'dia': '2024-03-04',
        'horario': '14:00', 'disciplina': 'Matemática', 'duracao': 90,
    }
    dados.update(extra)
    return dados


# === AGENDAMENTO ===

def test_sem_creditos_pede_confirmacao(admin_client, cadastros):
    response = admin_client.post('/admin/agenda/aulas', json=aula_json())

    assert response.status_code == 200
    dados = response.get_json()
    assert dados['scheduled'] is False
    assert dados['confirmationRequired'] is True
    assert dados['warnings']['creditWarning'] is True
    assert dados['data']['disciplina'] == 'Matemática'
    assert cadastros.todos('scheduledClasses') == {}
    assert cadastros.documento('students', 'a1')['credits'] == 0.5


def test_confirmado_agenda_e_debita(admin_client, cadastros):
    response = admin_client.post('/admin/agenda/aulas', json=aula_json(ciente_sem_creditos=True))

    assert response.status_code == 201
    aula_id = response.get_json()['id']
    aula = cadastros.documento('scheduledClasses', aula_id)
    assert aula['creditsConsumed'] == 1.5
    assert aula['status'] == 'scheduled'
    assert aula['reportRegistered'] is False
    assert cadastros.documento('students', 'a1')['credits'] == pytest.approx(-1.0)
    assert cadastros.commits == 1


def test_saldo_suficiente_nao_pede_confirmacao(admin_client, cadastros):
    response = admin_client.post('/admin/agenda/aulas', json=aula_json(aluno_id='a2'))

    assert response.status_code == 201
    assert response.get_json()['warnings']['creditWarning'] is False
    assert cadastros.documento('students', 'a2')['credits'] == pytest.approx(8.5)


def test_avisos_nao_gravam_nada(admin_client, cadastros):
    response = admin_client.post('/admin/agenda/avisos', json=aula_json(aluno_id='a2', horario='18:00'))

    assert response.get_json() == {
        'creditsNeeded': 1.5,
        'creditWarning': False,
        'availabilityWarning': True,
        'conflictWarning': False,
    }
    assert cadastros.todos('scheduledClasses') == {}


def test_conflito_avisa_mas_nao_bloqueia(admin_client, cadastros):
    admin_client.post('/admin/agenda/aulas', json=aula_json(aluno_id='a2'))
    response = admin_client.post('/admin/agenda/aulas', json=aula_json(aluno_id='a2', horario='15:00'))

    assert response.status_code == 201
    assert response.get_json()['warnings']['conflictWarning'] is True
    assert len(cadastros.todos('scheduledClasses')) == 2


def test_horario_invalido(admin_client, cadastros):
    response = admin_client.post('/admin/agenda/aulas', json=aula_json(horario='25:00'))

    assert response.status_code == 400
    assert 'horario' in response.get_json()['fields']


def test_data_fora_do_calendario(admin_client, cadastros):
    response = admin_client.post('/admin/agenda/aulas', json=aula_json(dia='2024-02-30', ciente_sem_creditos=True))

    assert response.status_code == 400
    assert 'dia' in response.get_json()['fields']
    assert cadastros.todos('scheduledClasses') == {}


def test_aula_sem_custo_nao_debita(admin_client, cadastros):
    response = admin_client.post('/admin/agenda/aulas', json=aula_json(aluno_id='a2', creditos_por_hora=0))

    assert response.status_code == 201
    assert response.get_json()['warnings']['creditsNeeded'] == 0
    aula = cadastros.documento('scheduledClasses', response.get_json()['id'])
    assert aula['creditsConsumed'] == 0
    assert cadastros.documento('students', 'a2')['credits'] == 10


def test_aluno_inexistente(admin_client, cadastros):
    response = admin_client.post('/admin/agenda/aulas', json=aula_json(aluno_id='nao-existe'))
    assert response.status_code == 404


def test_editar_aula_mantem_creditos(admin_client, cadastros):
    criada = admin_client.post('/admin/agenda/aulas', json=aula_json(aluno_id='a2')).get_json()

    response = admin_client.put(f"/admin/agenda/aulas/{criada['id']}",
                                json=aula_json(aluno_id='a2', horario='15:00', duracao=120, status='canceled'))

    assert response.status_code == 200
    aula = cadastros.documento('scheduledClasses', criada['id'])
    assert aula['time'] == '15:00'
    assert aula['status'] == 'canceled'
    assert aula['creditsConsumed'] == 1.5
    # Cancelar não estorna
    assert cadastros.documento('students', 'a2')['credits'] == pytest.approx(8.5)


def test_grade_do_dia_com_conflito(admin_client, cadastros):
    for aula_id, horario in (('c1', '14:00'), ('c2', '14:30')):
        cadastros.inserir('scheduledClasses', aula_id, {
            'date': '2024-03-04', 'time': horario, 'studentId': 'a1',
            'professionalId': 'p1', 'duration': 30, 'status': 'scheduled',
        })

    response = admin_client.get('/admin/agenda/dia?data=2024-03-04')

    dados = response.get_json()
    assert dados['conflicts'] == [{'professionalId': 'p1', 'slot': '14:00', 'items': ['c1', 'c2']}]
    linha = dados['rows'][0]
    assert linha['professionalName'] == 'Ana Souza'
    assert [c['studentName'] for c in linha['cells']['14:00']] == ['Bruno Lima', 'Bruno Lima']


def test_data_invalida_na_grade(admin_client):
    response = admin_client.get('/admin/agenda/dia?data=04/03/2024')
    assert response.status_code == 400


# === TURMAS ===

def turma_json(**extra):
    dados = {
        'nome': 'Reforço de Química', 'aluno_ids': ['a1', 'a2'], 'profissional_id': 'p1',
        'creditos_por_aula': 1.5, 'tipo_agenda': 'recurring',
        'dias': {'segunda': '14:00', 'quarta': '10:00'},
    }
    dados.update(extra)
    return dados


def test_turma_com_um_aluno(admin_client, cadastros):
    response = admin_client.post('/admin/turmas', json=turma_json(aluno_ids=['a1', 'a1']))

    assert response.status_code == 400
    assert 'aluno_ids' in response.get_json()['fields']
    assert cadastros.todos('classGroups') == {}


def test_cria_e_arquiva_turma(admin_client, cadastros):
    response = admin_client.post('/admin/turmas', json=turma_json())
    assert response.status_code == 201
    turma_id = response.get_json()['id']
    turma = cadastros.documento('classGroups', turma_id)
    assert turma['schedule'] == {'type': 'recurring', 'days': {'segunda': '14:00', 'quarta': '10:00'}}
    assert turma['status'] == 'active'

    instancias = admin_client.get(
        f'/admin/turmas/{turma_id}/instancias?inicio=2024-03-04&fim=2024-03-10'
    ).get_json()
    assert [(i['date'], i['time']) for i in instancias] == [('2024-03-04', '14:00'), ('2024-03-06', '10:00')]
    assert all(i['reportStatus'] == 'Pendente' for i in instancias)

    admin_client.post(f'/admin/turmas/{turma_id}/arquivar')
    assert cadastros.documento('classGroups', turma_id)['status'] == 'archived'
    assert admin_client.get(
        f'/admin/turmas/{turma_id}/instancias?inicio=2024-03-04&fim=2024-03-10'
    ).get_json() == []


def test_turma_com_dia_invalido(admin_client, cadastros):
    response = admin_client.post('/admin/turmas', json=turma_json(dias={'sabado2': '10:00'}))
    assert response.status_code == 400


# === FINANCEIRO ===

def transacao_json(**extra):
    dados = {'tipo': 'credit', 'valor': 300, 'dia': '2024-03-05', 'creditos': 4, 'aluno_id': 'a1'}
    dados.update(extra)
    return dados


def test_credito_soma_no_saldo(admin_client, cadastros):
    response = admin_client.post('/admin/financeiro/transacoes', json=transacao_json())

    assert response.status_code == 201
    transacao = cadastros.documento('transactions', response.get_json()['id'])
    assert transacao['registeredById'] == 'admin-1'
    assert transacao['credits'] == 4
    assert cadastros.documento('students', 'a1')['credits'] == pytest.approx(4.5)


def test_repeticao_com_chave_nao_soma_duas_vezes(admin_client, cadastros):
    corpo = transacao_json(chave_idempotencia='pix-123')

    primeira = admin_client.post('/admin/financeiro/transacoes', json=corpo)
    segunda = admin_client.post('/admin/financeiro/transacoes', json=corpo)

    assert primeira.status_code == 201
    assert segunda.status_code == 200
    assert segunda.get_json() == {'id': 'pix-123', 'duplicate': True}
    assert list(cadastros.todos('transactions')) == ['pix-123']
    assert cadastros.documento('students', 'a1')['credits'] == pytest.approx(4.5)


def test_credito_sem_aluno(admin_client, cadastros):
    response = admin_client.post('/admin/financeiro/transacoes', json=transacao_json(aluno_id=''))

    assert response.status_code == 400
    assert 'aluno_id' in response.get_json()['fields']
    assert cadastros.todos('transactions') == {}


def test_valor_negativo(admin_client, cadastros):
    response = admin_client.post('/admin/financeiro/transacoes', json=transacao_json(valor=-10))
    assert response.status_code == 400


def test_transacao_em_data_inexistente(admin_client, cadastros):
    response = admin_client.post('/admin/financeiro/transacoes', json=transacao_json(dia='2024-02-30'))

    assert response.status_code == 400
    assert 'dia' in response.get_json()['fields']
    assert cadastros.todos('transactions') == {}
    assert cadastros.documento('students', 'a1')['credits'] == 0.5


def test_resumo_do_mes(admin_client, cadastros):
    admin_client.post('/admin/financeiro/transacoes', json=transacao_json())
    admin_client.post('/admin/financeiro/transacoes', json={
        'tipo': 'payment', 'valor': 120, 'dia': '2024-03-20', 'categoria': 'Aluguel',
    })

    resumo = admin_client.get('/admin/financeiro/resumo?ano=2024&mes=3').get_json()

    assert resumo['totalIncome'] == 300
    assert resumo['totalExpenses'] == 120
    assert resumo['balance'] == 180


def test_mes_invalido(admin_client):
    assert admin_client.get('/admin/financeiro/resumo?ano=2024&mes=13').status_code == 400


def test_remuneracoes(admin_client, cadastros):
    cadastros.inserir('scheduledClasses', 'c1', {
        'date': '2024-03-04', 'time': '14:00', 'studentId': 'a1',
        'professionalId': 'p1', 'duration': 90, 'status': 'completed',
    })
    cadastros.inserir('collaborators', 'col-1', {
        'name': 'Marta', 'remunerationType': 'fixed', 'fixedSalary': 2000,
    })

    dados = admin_client.get('/admin/financeiro/remuneracoes?ano=2024&mes=3').get_json()

    profissional = dados['professionals'][0]
    assert profissional['professionalName'] == 'Ana Souza'
    assert profissional['individualHours'] == 1.5
    assert profissional['total'] == 120
    assert dados['collaborators'] == [
        {'collaboratorId': 'col-1', 'name': 'Marta', 'remunerationType': 'fixed', 'total': 2000},
    ]


def test_categorias(admin_client):
    response = admin_client.put('/admin/financeiro/categorias', json={
        'incomeCategories': ['Mensalidade', 'Mensalidade '], 'expenseCategories': ['Aluguel'],
    })
    assert response.get_json()['incomeCategories'] == ['Mensalidade']
    assert admin_client.get('/admin/financeiro/categorias').get_json()['expenseCategories'] == ['Aluguel']


# === CADASTROS ===

def test_cadastro_de_aluno_comeca_sem_creditos(admin_client, db):
    response = admin_client.post('/admin/alunos', json={'nome': 'Daniel Reis', 'status': 'matricula'})

    assert response.status_code == 201
    aluno = db.documento('students', response.get_json()['id'])
    assert aluno['credits'] == 0.0
    assert 'email' not in aluno


def test_erro_de_formulario_nao_devolve_senha(admin_client):
    response = admin_client.post('/admin/profissionais', json={'nome': 'X', 'senha': 'segredo1'})

    assert response.status_code == 400
    assert 'senha' not in response.get_json()['data']


@patch('src.admin.services.criar_identidade', return_value='uid-novo')
def test_cadastro_de_profissional(mock_identidade, admin_client, db):
    response = admin_client.post('/admin/profissionais', json={
        'nome': 'Pedro Alves', 'telefone': '11999990000', 'login': 'pedro', 'senha': 'segredo1',
        'disciplinas': ['Física'],
    })

    assert response.status_code == 201
    mock_identidade.assert_called_once_with('pedro', 'segredo1')
    profissional = db.documento('professionals', 'uid-novo')
    assert profissional['status'] == 'ativo'
    assert profissional['disciplines'] == ['Física']


def test_inativar_profissional(admin_client, cadastros):
    response = admin_client.post('/admin/profissionais/p1/status')
    assert response.get_json()['status'] == 'inativo'
    assert cadastros.documento('professionals', 'p1')['status'] == 'inativo'


def test_disponibilidade_invalida(admin_client, cadastros):
    response = admin_client.put('/admin/profissionais/p1/disponibilidade',
                                json={'disponibilidade': {'segunda': ['8h']}})
    assert response.status_code == 400


@patch('src.admin.services.criar_identidade', return_value='uid-col')
def test_colaborador_com_acesso(mock_identidade, admin_client, db):
    response = admin_client.post('/admin/colaboradores', json={
        'nome': 'Marta Reis', 'cargo': 'Secretária', 'login': 'marta', 'senha': 'segredo1',
        'acesso_sistema': ['admin'], 'permissoes': {'canAccessAgenda': True},
    })

    assert response.get_json()['id'] == 'uid-col'
    colaborador = db.documento('collaborators', 'uid-col')
    assert colaborador['systemAccess'] == ['admin']
    assert colaborador['adminPermissions']['canAccessAgenda'] is True
    assert colaborador['adminPermissions']['canAccessFinancial'] is False


def test_acesso_legado_regravado_como_lista(admin_client, db):
    db.inserir('collaborators', 'col-1', {'name': 'Marta', 'systemAccess': {'0': 'admin'}})

    response = admin_client.put('/admin/colaboradores/col-1/acesso', json={
        'acesso_sistema': ['teacher'], 'permissoes': {},
    })

    assert response.status_code == 200
    assert db.documento('collaborators', 'col-1')['systemAccess'] == ['teacher']
