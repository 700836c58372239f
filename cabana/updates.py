"""Typed partial updates for admin edit endpoints.

Each update class lists the fields an admin may change. Unknown keys in the
payload are rejected instead of being silently dropped.
"""
from dataclasses import dataclass, fields
from decimal import Decimal, InvalidOperation


class UpdateError(ValueError):
    pass


class _Unset:
    def __repr__(self):
        return 'UNSET'


UNSET = _Unset()


def _to_decimal(name, value):
    if value is None or value == '':
        return None
    try:
        number = Decimal(str(value).strip().replace(',', '.'))
    except InvalidOperation as exc:
        raise UpdateError(f'Valor invalido para {name}.') from exc
    if not number.is_finite():
        raise UpdateError(f'Valor invalido para {name}.')
    return number


def _to_bool(name, value):
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in {'true', '1', 'on', 'yes', 'sim'}:
        return True
    if text in {'false', '0', 'off', 'no', 'nao'}:
        return False
    raise UpdateError(f'Valor invalido para {name}.')


def _to_text(name, value):
    if value is None:
        return ''
    if isinstance(value, (dict, list)):
        raise UpdateError(f'Valor invalido para {name}.')
    return str(value).strip()


CONVERTERS = {
    Decimal: _to_decimal,
    bool: _to_bool,
    str: _to_text,
}


@dataclass
class PartialUpdate:
    @classmethod
    def from_payload(cls, payload):
        if not isinstance(payload, dict):
            raise UpdateError('Corpo da requisicao invalido.')
        allowed = {field.name: field for field in fields(cls)}
        unknown = sorted(set(payload) - set(allowed))
        if unknown:
            raise UpdateError(f'Campos nao permitidos: {", ".join(unknown)}.')
        if not payload:
            raise UpdateError('Nenhum campo informado.')

        values = {name: CONVERTERS[allowed[name].type](name, value) for name, value in payload.items()}
        update = cls(**values)
        update.validate()
        return update

    def validate(self):
        pass

    def changed_fields(self):
        return {
            field.name: getattr(self, field.name)
            for field in fields(self)
            if getattr(self, field.name) is not UNSET
        }

    def apply(self, instance):
        changed = self.changed_fields()
        for name, value in changed.items():
            setattr(instance, name, value)
        instance.save(update_fields=list(changed))
        return instance


@dataclass
class PrecoUpdate(PartialUpdate):
    descricao: str = UNSET
    valor: Decimal = UNSET
    categoria: str = UNSET
    disponivel: bool = UNSET

    def validate(self):
        if self.valor is not UNSET and (self.valor is None or self.valor < 0):
            raise UpdateError('Informe um valor valido para o item.')
        if self.descricao is not UNSET and not self.descricao:
            raise UpdateError('Descricao nao pode ficar vazia.')
        if self.categoria is not UNSET and not self.categoria:
            raise UpdateError('Categoria nao pode ficar vazia.')


@dataclass
class FinanceiroUpdate(PartialUpdate):
    valor_final: Decimal = UNSET
    custos: Decimal = UNSET
    valor_itens_extras: Decimal = UNSET
    descricao_itens_extras: str = UNSET

    def validate(self):
        # valor_final may be cleared; the other money fields are NOT NULL.
        if self.valor_itens_extras is None:
            self.valor_itens_extras = Decimal('0.00')
        if self.custos is None:
            self.custos = Decimal('0.00')


@dataclass
class PacoteUpdate(PartialUpdate):
    nome: str = UNSET
    descricao: str = UNSET
    valor: Decimal = UNSET

    def validate(self):
        if self.valor is not UNSET and (self.valor is None or self.valor <= 0):
            raise UpdateError('Informe um valor maior que zero.')
        if self.nome is not UNSET and not self.nome:
            raise UpdateError('Nome do pacote e obrigatorio.')


@dataclass
class DepoimentoUpdate(PartialUpdate):
    texto: str = UNSET
    aprovado: bool = UNSET

    def validate(self):
        if self.texto is not UNSET and not self.texto:
            raise UpdateError('O texto do depoimento nao pode ficar vazio.')
