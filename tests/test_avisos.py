import unittest
from datetime import date

from src.core.agenda import agregar_aulas
from src.core.avisos import (
    aviso_conflito, aviso_credito, aviso_disponibilidade, avaliar_agendamento,
    creditos_necessarios,
)
from src.core.models import Aluno, AulaAgendada, Profissional


class TestAvisosDeAgendamento(unittest.TestCase):

    def setUp(self):
        self.aluno = Aluno(id='a1', nome='Bruno', creditos=1.5)
        self.profissional = Profissional(id='p1', nome='Ana', disponibilidade={
            'segunda': ['14:00', '15:00'],
        })

    def test_creditos_necessarios(self):
        self.assertEqual(creditos_necessarios(90), 1.5)
        self.assertEqual(creditos_necessarios(60, 2.0), 2.0)

    def test_saldo_igual_nao_avisa(self):
        self.assertFalse(aviso_credito(self.aluno, 1.5))

    def test_saldo_um_centavo_abaixo_avisa(self):
        self.aluno.creditos = 1.5 - 0.01
        self.assertTrue(aviso_credito(self.aluno, 1.5))

    def test_sem_disponibilidade_cadastrada_nunca_avisa(self):
        profissional = Profissional(id='p2', disponibilidade={})
        for horario in ('06:00', '14:00', '23:30'):
            self.assertFalse(aviso_disponibilidade(profissional, '2024-03-04', horario))

    def test_horario_fora_da_disponibilidade(self):
        # 2024-03-04 é segunda; 2024-03-05 é terça (sem horários)
        self.assertFalse(aviso_disponibilidade(self.profissional, '2024-03-04', '14:00'))
        self.assertTrue(aviso_disponibilidade(self.profissional, '2024-03-04', '16:00'))
        self.assertTrue(aviso_disponibilidade(self.profissional, '2024-03-05', '14:00'))

    def test_conflito_por_sobreposicao(self):
        existente = AulaAgendada(id='c1', data='2024-03-04', horario='14:00', profissional_id='p1', duracao=90)
        itens = agregar_aulas([existente], [], date(2024, 3, 4), date(2024, 3, 4))

        self.assertTrue(aviso_conflito(itens, 'p1', '2024-03-04', '15:00', 60))
        self.assertFalse(aviso_conflito(itens, 'p1', '2024-03-04', '15:30', 60))
        self.assertFalse(aviso_conflito(itens, 'p2', '2024-03-04', '14:00', 60))
        # Editar a própria aula não conflita com ela mesma
        self.assertFalse(aviso_conflito(itens, 'p1', '2024-03-04', '14:00', 60, ignorar_aula_id='c1'))

    def test_aula_cancelada_nao_conflita(self):
        cancelada = AulaAgendada(id='c1', data='2024-03-04', horario='14:00', profissional_id='p1',
                                 status='canceled')
        itens = agregar_aulas([cancelada], [])
        self.assertFalse(aviso_conflito(itens, 'p1', '2024-03-04', '14:00', 60))

    def test_avaliacao_completa(self):
        avisos = avaliar_agendamento(self.aluno, self.profissional, '2024-03-04', '16:00', 120)

        self.assertEqual(avisos.to_dict(), {
            'creditsNeeded': 2.0,
            'creditWarning': True,
            'availabilityWarning': True,
            'conflictWarning': False,
        })
        self.assertTrue(avisos.algum)
