import copy
import unittest
from datetime import datetime, timedelta, timezone

from src.core.financeiro import (
    contar_dia_semana_no_mes, data_utc, historico_mensal, projetar_remuneracao,
    projetar_remuneracoes, remuneracao_colaborador, resumo_mensal,
)
from src.core.models import AgendaTurma, AulaAgendada, Colaborador, Profissional, Transacao, Turma


def transacao(tipo, valor, data, **extra):
    return Transacao(tipo=tipo, valor=valor, data=data, **extra)


class TestResumoFinanceiro(unittest.TestCase):

    def setUp(self):
        self.transacoes = [
            transacao('credit', 400.0, '2024-03-05'),
            transacao('monthly', 650.0, '2024-03-10'),
            transacao('payment', 240.0, '2024-03-28'),
            transacao('credit', 100.0, '2024-04-01'),
        ]

    def test_totais_do_mes(self):
        resumo = resumo_mensal(self.transacoes, 2024, 3)
        self.assertEqual(resumo.total_receitas, 1050.0)
        self.assertEqual(resumo.total_despesas, 240.0)
        self.assertEqual(resumo.saldo, 810.0)

    def test_resumo_idempotente_e_sem_efeitos(self):
        originais = copy.deepcopy(self.transacoes)
        primeiro = resumo_mensal(self.transacoes, 2024, 3).to_dict()
        segundo = resumo_mensal(self.transacoes, 2024, 3).to_dict()
        self.assertEqual(primeiro, segundo)
        self.assertEqual(self.transacoes, originais)

    def test_saldo_e_receitas_menos_despesas(self):
        for mes in (2, 3, 4):
            resumo = resumo_mensal(self.transacoes, 2024, mes)
            self.assertEqual(resumo.saldo, resumo.total_receitas - resumo.total_despesas)
            self.assertGreaterEqual(resumo.total_receitas, 0)
            self.assertGreaterEqual(resumo.total_despesas, 0)

    def test_despesa_gravada_com_sinal(self):
        with self.assertLogs('src.core.financeiro', level='WARNING'):
            resumo = resumo_mensal([
                transacao('credit', 400.0, '2024-03-05'),
                transacao('payment', -120.0, '2024-03-20', id='legado'),
            ], 2024, 3)
        self.assertEqual(resumo.total_despesas, 120.0)
        self.assertEqual(resumo.saldo, 280.0)

    def test_virada_de_mes_em_string(self):
        transacoes = [transacao('credit', 50.0, '2024-01-31')]
        self.assertEqual(resumo_mensal(transacoes, 2024, 1).total_receitas, 50.0)
        self.assertEqual(resumo_mensal(transacoes, 2024, 2).total_receitas, 0.0)

    def test_datetime_com_fuso_convertido_para_utc(self):
        # 31/01 23:30 em São Paulo já é 01/02 em UTC
        brasilia = timezone(timedelta(hours=-3))
        valor = datetime(2024, 1, 31, 23, 30, tzinfo=brasilia)
        self.assertEqual(data_utc(valor).isoformat(), '2024-02-01')
        self.assertEqual(data_utc('2024-01-31').isoformat(), '2024-01-31')
        self.assertIsNone(data_utc('31/01/2024'))

    def test_historico_acumulado(self):
        serie = historico_mensal(self.transacoes, 2024, 4, meses=3)

        self.assertEqual([(s['year'], s['month']) for s in serie], [(2024, 2), (2024, 3), (2024, 4)])
        self.assertEqual([s['accumulatedBalance'] for s in serie], [0.0, 810.0, 910.0])
        self.assertEqual(serie[2]['startingBalance'], 810.0)
        self.assertEqual(serie[2]['operationalBalance'], 100.0)


class TestRemuneracao(unittest.TestCase):

    def setUp(self):
        self.profissional = Profissional(id='p1', nome='Ana', valor_hora_individual=80.0,
                                         valor_hora_turma=50.0)

    def test_duas_aulas_de_noventa_minutos(self):
        aulas = [
            AulaAgendada(id='c1', data='2024-03-05', profissional_id='p1', duracao=90),
            AulaAgendada(id='c2', data='2024-03-19', profissional_id='p1', duracao=90),
            AulaAgendada(id='c3', data='2024-03-20', profissional_id='p1', duracao=60, status='canceled'),
            AulaAgendada(id='c4', data='2024-04-02', profissional_id='p1', duracao=60),
        ]
        projecao = projetar_remuneracao(self.profissional, aulas, [], 2024, 3)

        self.assertEqual(projecao.horas_individuais, 3.0)
        self.assertEqual(projecao.ganhos_individuais, 240.0)
        self.assertEqual(projecao.horas_turma, 0)
        self.assertEqual(projecao.total, 240.0)

    def test_horas_de_turma_segunda_e_quarta(self):
        # Maio de 2024: 31 dias, 4 segundas e 5 quartas
        self.assertEqual(contar_dia_semana_no_mes(2024, 5, 'segunda'), 4)
        self.assertEqual(contar_dia_semana_no_mes(2024, 5, 'quarta'), 5)

        turma = Turma(id='t1', profissional_id='p1', creditos_por_aula=1.5,
                      agenda=AgendaTurma(tipo='recurring', dias={'segunda': '14:00', 'quarta': '14:00'}))
        projecao = projetar_remuneracao(self.profissional, [], [turma], 2024, 5)

        self.assertEqual(projecao.horas_turma, 13.5)
        self.assertEqual(projecao.ganhos_turma, 675.0)

    def test_turma_arquivada_nao_conta(self):
        turma = Turma(id='t1', profissional_id='p1', creditos_por_aula=1.5, status='archived',
                      agenda=AgendaTurma(tipo='recurring', dias={'segunda': '14:00'}))
        self.assertEqual(projetar_remuneracao(self.profissional, [], [turma], 2024, 5).horas_turma, 0)

    def test_valor_ausente_conta_como_zero(self):
        sem_valor = Profissional.from_dict({'name': 'Caio'}, 'p2')
        aulas = [AulaAgendada(id='c1', data='2024-03-05', profissional_id='p2', duracao=60)]
        self.assertEqual(projetar_remuneracao(sem_valor, aulas, [], 2024, 3).total, 0.0)

    def test_apenas_profissionais_ativos(self):
        inativo = Profissional(id='p3', nome='Zé', status='inativo')
        projecoes = projetar_remuneracoes([self.profissional, inativo], [], [], 2024, 3)
        self.assertEqual([p.profissional_id for p in projecoes], ['p1'])


class TestRemuneracaoColaborador(unittest.TestCase):

    def test_salario_fixo(self):
        colaborador = Colaborador(id='c1', tipo_remuneracao='fixed', salario_fixo=2500.0)
        self.assertEqual(remuneracao_colaborador(colaborador, [], 2024, 3), 2500.0)

    def test_comissao_sobre_receitas_registradas(self):
        colaborador = Colaborador(id='c1', tipo_remuneracao='commission', percentual_comissao=10)
        transacoes = [
            transacao('credit', 400.0, '2024-03-05', registrado_por='c1'),
            transacao('monthly', 600.0, '2024-03-06', registrado_por='c1'),
            transacao('payment', 300.0, '2024-03-07', registrado_por='c1'),
            transacao('credit', 900.0, '2024-03-08', registrado_por='outro'),
        ]
        self.assertEqual(remuneracao_colaborador(colaborador, transacoes, 2024, 3), 100.0)
