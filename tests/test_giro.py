from datetime import date, timedelta

from padaria.domain.giro import (
    OrigemGiro,
    arredondar,
    calcular_giros,
    giro_meta,
    giro_projetado,
    inicio_semana,
    media_historica,
    resolver_giro,
    resumo_origens,
    ultimas_semanas,
)
from padaria.domain.models import Cliente, Entrega

# quarta-feira; a semana corrente começa em 2025-03-10 e fica fora da janela
REF = date(2025, 3, 12)
SEG = inicio_semana(REF)


def _terca(semanas_atras: int) -> date:
    return SEG - timedelta(weeks=semanas_atras) + timedelta(days=1)


def test_inicio_semana_e_segunda():
    assert SEG == date(2025, 3, 10)
    assert inicio_semana(date(2025, 3, 16)) == SEG  # domingo


def test_arredondar_meio_para_cima():
    assert arredondar(2.5) == 3
    assert arredondar(2.49) == 2
    assert arredondar(0) == 0


def test_personalizado_ignora_historico():
    cli = Cliente("c1", "Mercado A", giro_semanal_personalizado=55, quantidade_padrao=10)
    entregas = [Entrega("c1", _terca(i), 500) for i in range(1, 13)]
    g = resolver_giro(cli, entregas, REF)
    assert g.giro_semanal == 55
    assert g.origem == OrigemGiro.PERSONALIZADO


def test_historico_completo_media_de_12_semanas():
    cli = Cliente("c1", "Mercado A")
    entregas = [Entrega("c1", _terca(i), 10 * i) for i in range(1, 13)]
    # fora da janela: semana corrente e 13ª semana
    entregas.append(Entrega("c1", REF, 999))
    entregas.append(Entrega("c1", _terca(13), 999))
    g = resolver_giro(cli, entregas, REF)
    assert g.origem == OrigemGiro.HISTORICO_COMPLETO
    assert g.numero_semanas == 12
    assert g.giro_semanal == arredondar(sum(10 * i for i in range(1, 13)) / 12)


def test_historico_parcial_com_tres_semanas():
    cli = Cliente("c2", "Padaria B", quantidade_padrao=70, periodicidade_padrao=7)
    entregas = [
        Entrega("c2", _terca(1), 10),
        Entrega("c2", _terca(2), 20),
        Entrega("c2", _terca(3), 31),
    ]
    g = resolver_giro(cli, entregas, REF)
    assert g.origem == OrigemGiro.HISTORICO_PARCIAL
    assert g.numero_semanas == 3
    assert g.giro_semanal == 20  # 61 / 3


def test_cliente_quinzenal_com_24_semanas_divide_por_12():
    cli = Cliente("q", "Empório Q", quantidade_padrao=100, periodicidade_padrao=14)
    # uma entrega a cada duas semanas, de 23 a 1 semana atrás
    entregas = [Entrega("q", _terca(i), 100) for i in range(1, 24, 2)]
    g = resolver_giro(cli, entregas, REF)
    assert g.origem == OrigemGiro.HISTORICO_COMPLETO
    assert g.numero_semanas == 12
    assert g.giro_semanal == 50  # 6 entregas de 100 na janela / 12


def test_cliente_quinzenal_novo_conta_semanas_desde_a_primeira_entrega():
    # primeira entrega há 6 semanas, depois a cada duas semanas
    entregas = [Entrega("q", _terca(i), 100) for i in (6, 4, 2)]
    assert media_historica(entregas, REF) == (50, 6)


def test_entrega_na_primeira_semana_da_janela_e_historico_completo():
    entregas = [Entrega("c1", _terca(12), 60), Entrega("c1", _terca(1), 60)]
    g = resolver_giro(Cliente("c1", "Mercado A"), entregas, REF)
    assert g.origem == OrigemGiro.HISTORICO_COMPLETO
    assert g.giro_semanal == 10


def test_varias_entregas_na_mesma_semana_somam():
    entregas = [
        Entrega("c1", _terca(1), 10),
        Entrega("c1", _terca(1) + timedelta(days=2), 15),
    ]
    assert media_historica(entregas, REF) == (25, 1)


def test_retornos_nao_contam_no_giro():
    entregas = [
        Entrega("c1", _terca(1), 40),
        Entrega("c1", _terca(2), 30, tipo="retorno"),
    ]
    assert media_historica(entregas, REF) == (40, 1)


def test_projetado_sem_entregas():
    cli = Cliente("1", "Cliente 1", quantidade_padrao=70, periodicidade_padrao=7)
    g = resolver_giro(cli, [], REF)
    assert g.origem == OrigemGiro.PROJETADO
    assert g.giro_semanal == 70
    assert g.giro_projetado == 70
    assert g.giro_meta == 77
    assert g.numero_semanas == 0


def test_projetado_com_periodicidade_quinzenal():
    assert giro_projetado(30, 14) == 15
    assert giro_meta(15) == 17  # 16.5 arredonda para cima


def test_zeros_nao_dividem_por_zero():
    assert giro_projetado(70, 0) == 0
    assert giro_projetado(0, 7) == 0
    assert giro_projetado(None, None) == 0
    g = resolver_giro(Cliente("x", "Sem padrão", quantidade_padrao=0, periodicidade_padrao=0), [], REF)
    assert g.giro_semanal == 0
    assert g.origem == OrigemGiro.PROJETADO
    assert g.giro_meta == 0


def test_calcular_giros_por_cliente_e_resumo():
    clientes = [
        Cliente("a", "A", giro_semanal_personalizado=12),
        Cliente("b", "B", quantidade_padrao=14, periodicidade_padrao=7),
        Cliente("c", "C"),
    ]
    entregas = [Entrega("c", _terca(1), 8), Entrega("zz", _terca(1), 100)]
    giros = calcular_giros(clientes, entregas, REF)
    assert set(giros) == {"a", "b", "c"}
    assert giros["b"].giro_semanal == 14
    assert giros["c"].giro_semanal == 8
    resumo = resumo_origens(giros.values())
    assert resumo["personalizado"] == 1
    assert resumo["projetado"] == 1
    assert resumo["historico_parcial"] == 1
    assert resumo["historico_completo"] == 0


def test_ultimas_semanas_termina_na_semana_de_referencia():
    semanas = ultimas_semanas(REF, 3)
    assert [s["inicio"] for s in semanas] == [SEG - timedelta(weeks=2), SEG - timedelta(weeks=1), SEG]
    assert semanas[-1]["chave"] == "2025-11"
    assert semanas[-1]["display"] == "Sem 11"
