#############################################################################
#
#   Licensed under the Apache License, Version 2.0 (the "License");
#   you may not use this file except in compliance with the License.
#   You may obtain a copy of the License at
#
#       http://www.apache.org/licenses/LICENSE-2.0
#
#   Unless required by applicable law or agreed to in writing, software
#   distributed under the License is distributed on an "AS IS" BASIS,
#   WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
#   See the License for the specific language governing permissions and
#   limitations under the License.
#
#############################################################################
#
#  Project Name        :    MPEG DASH conformance checker
#
#  Author              :    Alex Ashley
#
#############################################################################
from dataclasses import dataclass, field
import datetime
import logging
import math
import re
from typing import NamedTuple
import urllib.parse

from lxml import etree as ET

from .date_time import UTC, from_iso_datetime, from_iso_duration, to_epoch_ms
from .exceptions import ParseError
from .manifest import DynamicManifest, Manifest, ManifestType, StaticManifest

def local_name(elt: ET.ElementBase) -> str | None:
    if not isinstance(elt.tag, str):
        return None
    return ET.QName(elt).localname


def find_children(elt: ET.ElementBase, name: str) -> list[ET.ElementBase]:
    """
    Finds child elements by local name, so that manifests that do not use
    the DASH namespace are also accepted
    """
    return [child for child in elt if local_name(child) == name]


def first_child(elt: ET.ElementBase, name: str) -> ET.ElementBase | None:
    for child in elt:
        if local_name(child) == name:
            return child
    return None


class SegmentEntry(NamedTuple):
    start: int
    duration: int


class PeriodTiming(NamedTuple):
    start: float
    duration: float | None


@dataclass(slots=True)
class TemplateInfo:
    media: str | None = None
    initialization: str | None = None
    timescale: int = 1
    duration: int | None = None
    start_number: int = 1
    presentation_time_offset: int = 0
    timeline: ET.ElementBase | None = None


@dataclass(slots=True)
class RepresentationSegments:
    """
    The segment URLs of one Representation. end is the time (in seconds,
    relative to the start of the Period) where the last listed media
    segment finishes.
    """
    urls: list[str] = field(default_factory=list)
    end: float | None = None
    span: float = 0.0


@dataclass(slots=True, frozen=True)
class ParseContext:
    mpd_type: ManifestType
    now: datetime.datetime
    availability_start_time: datetime.datetime | None
    time_shift_buffer_depth: float | None


class ManifestParser:
    """
    Converts the text of an MPD into a Manifest
    """

    URL_TEMPLATE_RE = re.compile(r'\$(Bandwidth|Number|RepresentationID|Time|)(%0\d+d)?\$')

    log: logging.Logger

    def __init__(self, log: logging.Logger | None = None) -> None:
        if log is None:
            log = logging.getLogger('DashValidator')
        self.log = log

    def parse(self, text: str | bytes,
              now: datetime.datetime | None = None,
              url: str | None = None) -> Manifest:
        if now is None:
            now = datetime.datetime.now(tz=UTC)
        if isinstance(text, str):
            text = text.encode('utf-8')
        parser = ET.XMLParser(resolve_entities=False, no_network=True)
        try:
            root = ET.fromstring(text, parser=parser)
        except ET.XMLSyntaxError as err:
            raise ParseError(f'Invalid manifest XML ({err})', url) from err
        if root is None or local_name(root) != 'MPD':
            name = None if root is None else local_name(root)
            raise ParseError(f'Expected an MPD root element, found "{name}"', url)
        try:
            return self.parse_mpd(root, now)
        except (TypeError, ValueError) as err:
            raise ParseError(f'Invalid manifest ({err})', url) from err

    def parse_mpd(self, root: ET.ElementBase, now: datetime.datetime) -> Manifest:
        mpd_type = ManifestType(root.get('type', 'static'))
        mpd_duration = self.duration_attr(root, 'mediaPresentationDuration')
        ast = self.datetime_attr(root, 'availabilityStartTime')
        ctx = ParseContext(
            mpd_type=mpd_type,
            now=now,
            availability_start_time=ast,
            time_shift_buffer_depth=self.duration_attr(root, 'timeShiftBufferDepth'))
        base = self.base_url(root, '')
        periods = find_children(root, 'Period')
        timings = self.period_timings(periods, mpd_duration)
        segments: list[str] = []
        live_edge: datetime.datetime | None = None
        longest_span = 0.0
        for period, timing in zip(periods, timings):
            for rep_segs in self.parse_period(period, base, timing, ctx):
                segments += rep_segs.urls
                longest_span = max(longest_span, rep_segs.span)
                if rep_segs.end is None or ast is None:
                    continue
                edge = ast + datetime.timedelta(seconds=timing.start + rep_segs.end)
                if live_edge is None or edge > live_edge:
                    live_edge = edge

        if mpd_duration is not None:
            total_duration = mpd_duration
        elif timings and all(t.duration is not None for t in timings):
            total_duration = sum(t.duration for t in timings)
        else:
            total_duration = longest_span
        self.log.debug('Parsed %s manifest: %d periods, %d segments, duration %.3f',
                       mpd_type, len(periods), len(segments), total_duration)

        if mpd_type == ManifestType.STATIC:
            return StaticManifest(
                total_duration=total_duration, segments=tuple(segments))

        if live_edge is None:
            live_edge = self.datetime_attr(root, 'publishTime')
            if live_edge is None:
                self.log.debug('Unable to calculate live edge, using current time')
                live_edge = now
        return DynamicManifest(
            total_duration=total_duration,
            time_at_head=to_epoch_ms(live_edge),
            segments=tuple(segments),
            minimum_update_period=self.duration_attr(root, 'minimumUpdatePeriod'))

    def period_timings(self, periods: list[ET.ElementBase],
                       mpd_duration: float | None) -> list[PeriodTiming]:
        starts: list[float] = []
        durations: list[float | None] = []
        next_start: float | None = 0.0
        for period in periods:
            start = self.duration_attr(period, 'start')
            if start is None:
                start = next_start if next_start is not None else 0.0
            duration = self.duration_attr(period, 'duration')
            starts.append(start)
            durations.append(duration)
            next_start = None if duration is None else start + duration
        for idx, duration in enumerate(durations):
            if duration is not None:
                continue
            if idx + 1 < len(starts):
                durations[idx] = starts[idx + 1] - starts[idx]
            elif mpd_duration is not None:
                durations[idx] = mpd_duration - starts[idx]
        return [PeriodTiming(s, d) for s, d in zip(starts, durations)]

    def parse_period(self, period: ET.ElementBase, base: str,
                     timing: PeriodTiming,
                     ctx: ParseContext) -> list[RepresentationSegments]:
        result: list[RepresentationSegments] = []
        base = self.base_url(period, base)
        period_tmpl = first_child(period, 'SegmentTemplate')
        period_list = first_child(period, 'SegmentList')
        for adp in find_children(period, 'AdaptationSet'):
            adp_base = self.base_url(adp, base)
            adp_tmpl = first_child(adp, 'SegmentTemplate')
            adp_list = first_child(adp, 'SegmentList')
            for rep in find_children(adp, 'Representation'):
                rep_base = self.base_url(rep, adp_base)
                templates = [t for t in (period_tmpl, adp_tmpl, first_child(rep, 'SegmentTemplate'))
                             if t is not None]
                seg_list = first_child(rep, 'SegmentList')
                if seg_list is None:
                    seg_list = adp_list if adp_list is not None else period_list
                if templates:
                    result.append(self.template_segments(
                        rep, rep_base, self.merge_templates(templates), timing, ctx))
                elif seg_list is not None:
                    result.append(self.list_segments(rep_base, seg_list))
                elif first_child(rep, 'BaseURL') is not None:
                    # single file Representation (SegmentBase)
                    result.append(RepresentationSegments(urls=[rep_base]))
                else:
                    self.log.warning(
                        'Representation %s has no segment information', rep.get('id'))
        return result

    def merge_templates(self, templates: list[ET.ElementBase]) -> TemplateInfo:
        """
        Combines SegmentTemplate elements from Period, AdaptationSet and
        Representation. The innermost value of each attribute wins.
        """
        attrs: dict[str, str] = {}
        timeline = None
        for tmpl in templates:
            attrs.update(tmpl.attrib)
            tl = first_child(tmpl, 'SegmentTimeline')
            if tl is not None:
                timeline = tl
        info = TemplateInfo(
            media=attrs.get('media'),
            initialization=attrs.get('initialization'),
            timescale=int(attrs.get('timescale', '1'), 10),
            start_number=int(attrs.get('startNumber', '1'), 10),
            presentation_time_offset=int(attrs.get('presentationTimeOffset', '0'), 10),
            timeline=timeline)
        if 'duration' in attrs:
            info.duration = int(attrs['duration'], 10)
        if info.timescale < 1:
            raise ValueError(f'SegmentTemplate@timescale must be positive: {info.timescale}')
        return info

    def template_segments(self, rep: ET.ElementBase, base: str, tmpl: TemplateInfo,
                          timing: PeriodTiming,
                          ctx: ParseContext) -> RepresentationSegments:
        rep_id = rep.get('id', '')
        bandwidth = rep.get('bandwidth', '')
        result = RepresentationSegments()
        if tmpl.initialization:
            result.urls.append(self.join(base, self.format_url_template(
                tmpl.initialization, rep_id, bandwidth)))
        if tmpl.media is None:
            return result
        now_tc: int | None = None
        elapsed = self.elapsed_in_period(timing, ctx)
        if elapsed is not None:
            now_tc = int(elapsed * tmpl.timescale) + tmpl.presentation_time_offset

        if tmpl.timeline is not None:
            entries = self.expand_timeline(
                tmpl.timeline, tmpl.timescale, tmpl.presentation_time_offset,
                timing.duration, now_tc)
            for idx, seg in enumerate(entries):
                result.urls.append(self.join(base, self.format_url_template(
                    tmpl.media, rep_id, bandwidth, tmpl.start_number + idx, seg.start)))
                result.span += seg.duration / tmpl.timescale
            if entries:
                last = entries[-1]
                result.end = (
                    last.start + last.duration - tmpl.presentation_time_offset) / tmpl.timescale
            return result

        if not tmpl.duration:
            self.log.warning(
                'Representation %s: SegmentTemplate without SegmentTimeline needs @duration',
                rep_id)
            return result
        first, count = self.template_range(tmpl, timing, ctx, elapsed, rep_id)
        for idx in range(first, count):
            decode_time = idx * tmpl.duration + tmpl.presentation_time_offset
            result.urls.append(self.join(base, self.format_url_template(
                tmpl.media, rep_id, bandwidth, tmpl.start_number + idx, decode_time)))
        if count > first:
            result.span = (count - first) * tmpl.duration / tmpl.timescale
            result.end = count * tmpl.duration / tmpl.timescale
        return result

    def template_range(self, tmpl: TemplateInfo, timing: PeriodTiming,
                       ctx: ParseContext, elapsed: float | None,
                       rep_id: str) -> tuple[int, int]:
        """
        Calculates the index range of the segments described by a
        SegmentTemplate@duration
        """
        total: int | None = None
        if timing.duration is not None:
            total = math.ceil(timing.duration * tmpl.timescale / tmpl.duration)
        if ctx.mpd_type == ManifestType.STATIC:
            if total is None:
                self.log.warning(
                    'Representation %s: unable to calculate number of segments without '
                    'a Period duration', rep_id)
                return (0, 0)
            return (0, total)
        if elapsed is None:
            self.log.warning(
                'Representation %s: MPD@availabilityStartTime is required for a live stream',
                rep_id)
            return (0, 0)
        available = max(0, math.floor(elapsed * tmpl.timescale / tmpl.duration))
        if total is not None:
            available = min(available, total)
        first = 0
        if ctx.time_shift_buffer_depth is not None:
            window = max(1, math.floor(
                ctx.time_shift_buffer_depth * tmpl.timescale / tmpl.duration))
            first = max(0, available - window)
        return (first, available)

    def expand_timeline(self, timeline: ET.ElementBase, timescale: int,
                        presentation_time_offset: int,
                        period_duration: float | None,
                        now_tc: int | None) -> list[SegmentEntry]:
        entries: list[SegmentEntry] = []
        items = find_children(timeline, 'S')
        start: int | None = None
        for idx, seg in enumerate(items):
            if seg.get('d') is None:
                raise ValueError('SegmentTimeline S@d is missing')
            duration = int(seg.get('d'), 10)
            if duration < 1:
                raise ValueError(f'SegmentTimeline S@d must be positive: {duration}')
            t = seg.get('t')
            if t is not None:
                start = int(t, 10)
            elif start is None:
                start = 0
            repeat = int(seg.get('r', '0'), 10)
            if repeat >= 0:
                count = repeat + 1
            else:
                # S@r < 0 repeats until the next S@t, the end of the Period or the live edge
                next_t = items[idx + 1].get('t') if idx + 1 < len(items) else None
                if next_t is not None:
                    count = -(-(int(next_t, 10) - start) // duration)
                elif period_duration is not None:
                    end = presentation_time_offset + int(period_duration * timescale)
                    count = -(-(end - start) // duration)
                elif now_tc is not None:
                    count = (now_tc - start) // duration
                else:
                    count = 1
                count = max(count, 0)
            for _ in range(count):
                entries.append(SegmentEntry(start, duration))
                start += duration
        return entries

    def list_segments(self, base: str, seg_list: ET.ElementBase) -> RepresentationSegments:
        result = RepresentationSegments()
        init = first_child(seg_list, 'Initialization')
        if init is not None and init.get('sourceURL'):
            result.urls.append(self.join(base, init.get('sourceURL')))
        timescale = int(seg_list.get('timescale', '1'), 10)
        duration = seg_list.get('duration')
        count = 0
        for seg_url in find_children(seg_list, 'SegmentURL'):
            media = seg_url.get('media')
            result.urls.append(self.join(base, media) if media else base)
            count += 1
        if duration is not None and timescale > 0:
            result.span = count * int(duration, 10) / timescale
            result.end = result.span
        return result

    @staticmethod
    def elapsed_in_period(timing: PeriodTiming, ctx: ParseContext) -> float | None:
        if ctx.mpd_type != ManifestType.DYNAMIC or ctx.availability_start_time is None:
            return None
        return (ctx.now - ctx.availability_start_time).total_seconds() - timing.start

    def format_url_template(self, url: str, rep_id: str, bandwidth: str,
                            seg_num: int = 0, decode_time: int = 0) -> str:
        """
        Replaces the template variables according the DASH template syntax
        """
        def repfn(matchobj) -> str:
            value = params[matchobj.group(1)]
            fmt = matchobj.group(2)
            if fmt is None or not isinstance(value, int):
                return f'{value}'
            fmt = r'{0' + fmt.replace('%', ':') + r'}'
            return fmt.format(value)

        params = {
            'RepresentationID': rep_id,
            'Bandwidth': int(bandwidth, 10) if bandwidth.isdigit() else bandwidth,
            'Number': seg_num,
            'Time': decode_time,
            '': '$',
        }
        return self.URL_TEMPLATE_RE.sub(repfn, url)

    def base_url(self, elt: ET.ElementBase, parent: str) -> str:
        base = first_child(elt, 'BaseURL')
        if base is None or not base.text:
            return parent
        return self.join(parent, base.text.strip())

    @staticmethod
    def join(base: str, url: str) -> str:
        if not base:
            return url
        return urllib.parse.urljoin(base, url)

    @staticmethod
    def duration_attr(elt: ET.ElementBase, name: str) -> float | None:
        value = elt.get(name)
        if value is None:
            return None
        return from_iso_duration(value).total_seconds()

    @staticmethod
    def datetime_attr(elt: ET.ElementBase, name: str) -> datetime.datetime | None:
        value = elt.get(name)
        if value is None:
            return None
        return from_iso_datetime(value)
